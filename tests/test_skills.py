"""
Tests for skill discovery, frontmatter parsing and the catalog.
"""

import pytest

from toolgate.skills.catalog import SkillCatalog
from toolgate.skills.loader import discover, discovery_paths, parse_frontmatter
from toolgate.skills.models import is_valid_name


def write_skill(root, dirname, name=None, description="Does a thing.", body="Step 1.\n"):
    d = root / dirname
    d.mkdir(parents=True)
    (d / "SKILL.md").write_text(
        f"---\nname: {name or dirname}\ndescription: {description}\n---\n{body}",
        encoding="utf-8",
    )
    return d


class TestNames:
    @pytest.mark.parametrize("name", ["a", "pdf", "release-notes", "v2-build-3", "x" * 64])
    def test_valid(self, name):
        assert is_valid_name(name)

    @pytest.mark.parametrize("name", ["", "Pdf", "-lead", "trail-", "double--dash", "under_score", "x" * 65, None])
    def test_invalid(self, name):
        assert not is_valid_name(name)


class TestParseFrontmatter:
    def test_valid(self, tmp_path):
        d = write_skill(tmp_path, "deploy", description="Ship it safely.")
        assert parse_frontmatter(d / "SKILL.md") == {"name": "deploy", "description": "Ship it safely."}

    def test_missing_file(self, tmp_path):
        assert parse_frontmatter(tmp_path / "SKILL.md") is None

    def test_too_short(self, tmp_path):
        p = tmp_path / "SKILL.md"
        p.write_text("---\nname: x\n", encoding="utf-8")
        assert parse_frontmatter(p) is None

    def test_no_opening_delimiter(self, tmp_path):
        p = tmp_path / "SKILL.md"
        p.write_text("name: x\ndescription: y\n---\n", encoding="utf-8")
        assert parse_frontmatter(p) is None

    def test_unterminated(self, tmp_path):
        p = tmp_path / "SKILL.md"
        p.write_text("---\nname: x\ndescription: y\nbody\n", encoding="utf-8")
        assert parse_frontmatter(p) is None

    def test_missing_description(self, tmp_path):
        p = tmp_path / "SKILL.md"
        p.write_text("---\nname: x\n---\nbody\n", encoding="utf-8")
        assert parse_frontmatter(p) is None

    def test_invalid_name(self, tmp_path):
        d = write_skill(tmp_path, "bad", name="Bad_Name")
        assert parse_frontmatter(d / "SKILL.md") is None

    def test_malformed_yaml(self, tmp_path):
        p = tmp_path / "SKILL.md"
        p.write_text("---\nname: [unclosed\ndescription: y\n---\n", encoding="utf-8")
        assert parse_frontmatter(p) is None


class TestDiscover:
    def test_scans_immediate_subdirectories(self, tmp_path):
        root = tmp_path / "skills"
        write_skill(root, "alpha")
        write_skill(root, "beta")
        (root / "not-a-skill").mkdir()
        (root / "loose.md").write_text("x")
        write_skill(root / "nested", "deep")
        names = [s.name for s in discover([root])]
        assert names == ["alpha", "beta"]

    def test_missing_paths_ignored(self, tmp_path):
        assert discover([tmp_path / "nope"]) == []

    def test_discovery_order(self, tmp_path):
        paths = discovery_paths(tmp_path, [tmp_path / "extra"])
        assert paths[0] == tmp_path / ".skills"
        assert paths[1].name == "skills"
        assert paths[-1] == tmp_path / "extra"


class TestCatalog:
    @pytest.fixture
    def catalog(self, tmp_path):
        root = tmp_path / "skills"
        write_skill(root, "deploy", description="Deploy the app.", body="Run make deploy.\n")
        write_skill(root, "review", description="Review code.")
        cat = SkillCatalog()
        cat.refresh([root])
        return cat

    def test_available_xml(self, catalog):
        xml = catalog.available_xml()
        assert xml.startswith("<available-skills>")
        assert '<skill name="deploy">\nDeploy the app.\n</skill>' in xml
        assert xml.endswith("</available-skills>")

    def test_empty_catalog_xml(self):
        cat = SkillCatalog()
        assert cat.available_xml() == ""
        assert cat.reminder_xml() == ""

    def test_load_marks_loaded(self, catalog):
        result = catalog.load("deploy")
        assert result.success
        assert "Run make deploy." in result.message
        assert catalog.is_loaded("deploy")
        assert catalog.loaded_names() == ["deploy"]

    def test_load_twice_recorded_once(self, catalog):
        catalog.load("deploy")
        catalog.load("deploy")
        assert catalog.loaded_names() == ["deploy"]

    def test_load_unknown_lists_available(self, catalog):
        result = catalog.load("nope")
        assert not result.success
        assert result.error == "Skill 'nope' not found. Use available skills: deploy, review"

    def test_reminder_xml(self, catalog):
        assert catalog.reminder_xml() == ""
        catalog.load("deploy")
        xml = catalog.reminder_xml()
        assert xml.startswith("<loaded-skills>\n<skill name=\"deploy\">")
        assert "Run make deploy." in xml
        assert "review" not in xml

    def test_clear_loaded(self, catalog):
        catalog.load("deploy")
        catalog.clear_loaded()
        assert catalog.loaded_names() == []
        assert not catalog.is_loaded("deploy")
