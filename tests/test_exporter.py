"""Tests for the image export descriptor."""

from structlog.testing import capture_logs

from imagebuild.backend.models import EXPORTER_IMAGE
from imagebuild.exporter import default_exporter, normalize_tags


class TestDefaultExporter:
    """Tests for default_exporter()."""

    def test_no_tags_means_no_export(self):
        assert default_exporter([]) is None

    def test_single_tag(self):
        entry = default_exporter(["myimg:latest"])
        assert entry.type == EXPORTER_IMAGE
        assert entry.attrs == {
            "name": "docker.io/library/myimg:latest",
            "name-canonical": "",
        }

    def test_names_joined_in_order(self):
        entry = default_exporter(["b", "ghcr.io/org/a:1"])
        assert entry.attrs["name"] == "docker.io/library/b:latest,ghcr.io/org/a:1"

    def test_invalid_tag_dropped_with_warning(self):
        with capture_logs() as logs:
            entry = default_exporter(["myimg:latest", "bad ref"])

        assert entry.attrs["name"] == "docker.io/library/myimg:latest"
        warnings = [log for log in logs if log["log_level"] == "warning"]
        assert len(warnings) == 1
        assert warnings[0]["event"] == "failed to normalize tag"
        assert warnings[0]["tag"] == "bad ref"
        assert "bad ref" in warnings[0]["error"]

    def test_all_tags_invalid_means_no_export(self):
        with capture_logs() as logs:
            entry = default_exporter(["bad ref", "UPPER"])

        assert entry is None
        events = [log["event"] for log in logs]
        assert events.count("failed to normalize tag") == 2
        assert "no valid tags, image will not be exported" in events

    def test_accepts_any_iterable(self):
        entry = default_exporter(tag for tag in ("app",))
        assert entry.attrs["name"] == "docker.io/library/app:latest"


class TestNormalizeTags:
    """Tests for normalize_tags()."""

    def test_keeps_order_and_duplicates(self):
        assert normalize_tags(["a", "b", "a"]) == [
            "docker.io/library/a:latest",
            "docker.io/library/b:latest",
            "docker.io/library/a:latest",
        ]

    def test_no_warning_for_valid_tags(self):
        with capture_logs() as logs:
            normalize_tags(["app:1"])
        assert logs == []

    def test_non_ascii_tag_dropped(self):
        with capture_logs() as logs:
            assert normalize_tags(["myimg:tågé", "myimg:1"]) == ["docker.io/library/myimg:1"]
        assert logs[0]["tag"] == "myimg:tågé"
