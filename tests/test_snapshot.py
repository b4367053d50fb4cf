"""Tests for snapshot persistence and links."""

import json

import pytest

from gherkin_dictionary.models import UsageReference
from gherkin_dictionary.snapshot import (
    load_snapshot,
    reference_url,
    save_snapshot,
    snapshot_to_document,
)

PLUGIN_URL = (
    "https://acme.atlassian.net/plugins/servlet/ac/"
    "com.devsamurai.plugin.jira.agile-test/main-page?ac.projectId=10001"
)


class TestDocument:
    """Tests for the published document layout."""

    def test_top_level_fields(self, sample_snapshot):
        """Test the document header fields."""
        document = snapshot_to_document(sample_snapshot)

        assert document["generatedAt"] == "2024-05-01T12:00:00Z"
        assert document["jiraBaseUrl"] == "https://acme.atlassian.net"
        assert document["agileTestBaseUrl"] == "https://agiletest.example.com"
        assert document["projectId"] == "10001"
        assert document["projectName"] == "Checkout"
        assert document["totalIssues"] == 3
        assert document["totalSteps"] == 7

    def test_step_layout(self, sample_snapshot):
        """Test the per-step layout."""
        first = snapshot_to_document(sample_snapshot)["steps"][0]

        assert first["step"] == "Given a registered user"
        assert first["count"] == 3
        assert first["testCases"][0] == {"id": "101", "issueId": "5001", "name": "Login works"}
        assert first["testCases"][2]["issueId"] is None

    def test_project_name_omitted_when_unset(self, sample_snapshot):
        """Test that an unset project name is left out."""
        snapshot = sample_snapshot.model_copy(update={"project_name": None})

        assert "projectName" not in snapshot_to_document(snapshot)


class TestPersistence:
    """Tests for saving and loading."""

    def test_save_and_load(self, sample_snapshot, temp_dir):
        """Test that a saved snapshot loads back equal."""
        path = temp_dir / "public" / "data.json"
        save_snapshot(sample_snapshot, path)

        assert path.exists()
        assert load_snapshot(path) == sample_snapshot

    def test_saved_file_is_readable_json(self, sample_snapshot, temp_dir):
        """Test that non-ASCII text is written as-is."""
        snapshot = sample_snapshot.model_copy(update={"project_name": "Caja rápida"})
        path = temp_dir / "data.json"
        save_snapshot(snapshot, path)

        text = path.read_text(encoding="utf-8")
        assert "Caja rápida" in text
        assert json.loads(text)["totalSteps"] == 7

    def test_load_missing_file(self, temp_dir):
        """Test loading a file that does not exist."""
        with pytest.raises(FileNotFoundError):
            load_snapshot(temp_dir / "missing.json")

    def test_load_invalid_json(self, temp_dir):
        """Test loading a corrupt file."""
        path = temp_dir / "data.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ValueError, match="not valid JSON"):
            load_snapshot(path)

    def test_load_without_steps(self, temp_dir):
        """Test loading a document without a steps array."""
        path = temp_dir / "data.json"
        path.write_text(json.dumps({"generatedAt": "2024-05-01T12:00:00Z"}), encoding="utf-8")

        with pytest.raises(ValueError, match="no steps array"):
            load_snapshot(path)

    def test_load_invalid_entry(self, temp_dir):
        """Test loading a document with a malformed step."""
        path = temp_dir / "data.json"
        document = {"generatedAt": "2024-05-01T12:00:00Z", "steps": [{"step": "Given a user", "count": 0}]}
        path.write_text(json.dumps(document), encoding="utf-8")

        with pytest.raises(ValueError, match="Invalid snapshot"):
            load_snapshot(path)

    def test_load_count_not_matching_references(self, temp_dir):
        """Test that per-occurrence counts from older documents are rejected."""
        path = temp_dir / "data.json"
        document = {
            "generatedAt": "2024-05-01T12:00:00Z",
            "steps": [{"step": "Given a user", "count": 5, "testCases": [{"id": "7", "name": "Case"}]}],
        }
        path.write_text(json.dumps(document), encoding="utf-8")

        with pytest.raises(ValueError, match="count 5 but 1 test case references"):
            load_snapshot(path)

    def test_load_repeated_reference(self, temp_dir):
        """Test that a test case listed twice for one step is rejected."""
        path = temp_dir / "data.json"
        document = {
            "generatedAt": "2024-05-01T12:00:00Z",
            "steps": [
                {
                    "step": "Given a user",
                    "count": 2,
                    "testCases": [{"id": "7", "name": "Case"}, {"id": "7", "name": "Case"}],
                }
            ],
        }
        path.write_text(json.dumps(document), encoding="utf-8")

        with pytest.raises(ValueError, match="same test case twice"):
            load_snapshot(path)

    def test_load_minimal_document(self, temp_dir):
        """Test that optional header fields take defaults."""
        path = temp_dir / "data.json"
        document = {
            "generatedAt": "2024-05-01T12:00:00Z",
            "steps": [{"step": "Given a user", "count": 1, "testCases": [{"id": "7", "name": "Case"}]}],
        }
        path.write_text(json.dumps(document), encoding="utf-8")

        snapshot = load_snapshot(path)
        assert snapshot.total_steps == 1
        assert snapshot.project_name is None
        assert snapshot.steps[0].usage_references[0].cross_reference_id is None


class TestReferenceUrl:
    """Tests for source record links."""

    def test_plugin_link_with_issue(self, sample_snapshot):
        """Test the AgileTest plugin link with a selected issue."""
        reference = UsageReference(record_id="101", cross_reference_id="5001", display_name="Login works")

        assert reference_url(sample_snapshot, reference) == (
            PLUGIN_URL + "#!selectedIssueId=5001&pluginPage=testCases"
        )

    def test_plugin_link_without_issue(self, sample_snapshot):
        """Test the plugin link when no issue is known."""
        reference = UsageReference(record_id="103")

        assert reference_url(sample_snapshot, reference) == PLUGIN_URL

    def test_no_link_without_jira(self, sample_snapshot):
        """Test that no link is built without a Jira base URL."""
        snapshot = sample_snapshot.model_copy(update={"jira_base_url": ""})

        assert reference_url(snapshot, UsageReference(record_id="101")) is None

    def test_no_link_without_project(self, sample_snapshot):
        """Test that plugin links need a project id."""
        snapshot = sample_snapshot.model_copy(update={"project_id": ""})

        assert reference_url(snapshot, UsageReference(record_id="101")) is None

    def test_jira_browse_link(self, sample_snapshot):
        """Test issue links for snapshots generated from Jira."""
        snapshot = sample_snapshot.model_copy(
            update={"agiletest_base_url": "", "jira_base_url": "https://acme.atlassian.net/"}
        )

        assert reference_url(snapshot, UsageReference(record_id="QA-12")) == (
            "https://acme.atlassian.net/browse/QA-12"
        )
