"""
Tests for building services from the storage section of the config.
"""

from plant_config.bridges import build_file_storage, build_quality_service, build_template_service
from plant_config.loader import parse_config
from plant_kernel.storage import LocalFileStorage


def _config(tmp_path):
    return parse_config({
        "storage": {
            "root_path": str(tmp_path / "files"),
            "public_base_url": "https://files.test/public/",
            "qa_evidence_bucket": "lab-evidence",
            "templates_bucket": "doc-templates",
        },
    })


class TestFileStorage:

    def test_root_and_base_url(self, tmp_path):
        storage = build_file_storage(_config(tmp_path))

        storage.upload("doc-templates", "a/b.pdf", b"%PDF")

        assert isinstance(storage, LocalFileStorage)
        assert (tmp_path / "files" / "doc-templates" / "a" / "b.pdf").read_bytes() == b"%PDF"
        assert storage.public_url("doc-templates", "a/b.pdf") == (
            "https://files.test/public/doc-templates/a/b.pdf"
        )

    def test_defaults(self):
        storage = build_file_storage(parse_config({}))

        assert storage.public_url("templates", "x.pdf") == "file://storage/templates/x.pdf"


class TestServices:

    def test_buckets_from_config(self, session, tmp_path, deterministic_clock):
        config = _config(tmp_path)

        quality = build_quality_service(session, config, clock=deterministic_clock)
        templates = build_template_service(session, config, clock=deterministic_clock)

        assert quality._bucket == "lab-evidence"
        assert templates._bucket == "doc-templates"
