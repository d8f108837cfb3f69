"""Tests for the release manager: checkpointing, resume, perform and clean."""

import json
from pathlib import Path
from typing import Dict, List, Optional
from unittest.mock import Mock

import pytest

from relman.core.executor.maven import MavenExecutor, MavenExecutorError
from relman.core.release.configuration import ReleaseConfiguration
from relman.core.release.exceptions import (
    ConfigurationNotFoundError,
    ConfigurationStoreError,
    ReleaseExecutionError,
    ReleaseFailureError,
    ReleaseScmCommandError,
    ReleaseScmRepositoryError,
)
from relman.core.release.manager import ReleaseManager
from relman.core.release.phase_base import ReleasePhase
from relman.core.release.phase_registry import PhaseRegistry
from relman.core.release.store import ConfigurationStore, FileConfigurationStore
from relman.core.scm.base import CheckOutScmResult, ScmError, ScmProvider
from relman.core.scm.repository import ScmRepositoryConfigurator

PHASE_ORDER = ["step1", "step2", "step3"]

POM = (
    "<project>"
    "<groupId>org.example</groupId>"
    "<artifactId>demo</artifactId>"
    "<version>1.0-SNAPSHOT</version>"
    "</project>"
)


class RecordingPhase(ReleasePhase):
    """Phase that records its invocations in a shared journal."""

    def __init__(self, name: str, journal: List[str], fail: bool = False):
        self._name = name
        self.journal = journal
        self.fail = fail

    @property
    def name(self) -> str:
        return self._name

    def execute(self, config: ReleaseConfiguration) -> None:
        self.journal.append(f"execute:{self._name}")
        if self.fail:
            raise ReleaseFailureError(f"{self._name} failed")

    def simulate(self, config: ReleaseConfiguration) -> None:
        self.journal.append(f"simulate:{self._name}")

    def clean(self, config: ReleaseConfiguration) -> None:
        self.journal.append(f"clean:{self._name}")


class MonitoringStore(ConfigurationStore):
    """In-memory store recording the completed phase of every write.

    When given the phases' journal, each write is appended to it as
    ``write:<completed phase>`` so tests can check the interleaving.
    """

    def __init__(
        self,
        initial: Optional[ReleaseConfiguration] = None,
        journal: Optional[List[str]] = None,
    ):
        self.journal = journal
        self.records: Dict[str, ReleaseConfiguration] = {}
        self.written_phases: List[Optional[str]] = []
        self.deleted: List[str] = []
        if initial is not None:
            self.records[initial.key] = initial.model_copy()

    def read(self, config: ReleaseConfiguration) -> ReleaseConfiguration:
        if config.key not in self.records:
            raise ConfigurationNotFoundError(f"No release record for {config.key}")
        return self.records[config.key].model_copy()

    def write(self, config: ReleaseConfiguration) -> None:
        self.written_phases.append(config.completed_phase)
        if self.journal is not None:
            self.journal.append(f"write:{config.completed_phase}")
        self.records[config.key] = config.model_copy()

    def delete(self, config: ReleaseConfiguration) -> bool:
        self.deleted.append(config.key)
        return self.records.pop(config.key, None) is not None


def make_config(**overrides) -> ReleaseConfiguration:
    values = {
        "group_id": "org.example",
        "artifact_id": "demo",
        "scm_source_url": "scm:git:https://example.com/demo.git",
        "release_label": "demo-1.0",
    }
    values.update(overrides)
    return ReleaseConfiguration(**values)


def make_project(root: Path) -> Path:
    project = root / "project"
    project.mkdir()
    (project / "pom.xml").write_text(POM)
    return project


@pytest.fixture
def journal() -> List[str]:
    return []


@pytest.fixture
def provider():
    provider = Mock(spec=ScmProvider)
    provider.validate_url.return_value = []
    provider.checkout.return_value = CheckOutScmResult(success=True)
    return provider


@pytest.fixture
def maven():
    return Mock(spec=MavenExecutor)


def build_manager(
    journal: List[str],
    store: ConfigurationStore,
    provider=None,
    maven=None,
    failing: Optional[str] = None,
    implemented: Optional[List[str]] = None,
) -> ReleaseManager:
    names = implemented if implemented is not None else PHASE_ORDER
    phases = [RecordingPhase(name, journal, fail=(name == failing)) for name in names]
    configurator = ScmRepositoryConfigurator({"git": lambda: provider})
    return ReleaseManager(
        registry=PhaseRegistry(PHASE_ORDER, phases),
        config_store=store,
        scm_configurator=configurator,
        maven_executor=maven or Mock(spec=MavenExecutor),
    )


class TestPrepare:
    """Tests for ReleaseManager.prepare."""

    def test_fresh_prepare_runs_all_phases_in_order(self, journal):
        """Test every phase runs once and its checkpoint is written before the next."""
        store = MonitoringStore(journal=journal)
        manager = build_manager(journal, store)

        result = manager.prepare(make_config())

        assert journal == [
            "execute:step1",
            "write:step1",
            "execute:step2",
            "write:step2",
            "execute:step3",
            "write:step3",
        ]
        assert store.written_phases == ["step1", "step2", "step3"]
        assert result.completed_phase == "step3"
        assert store.records["org.example:demo"].completed_phase == "step3"

    def test_resume_skips_completed_phases(self, journal):
        """Test preparation continues after the persisted completed phase."""
        store = MonitoringStore(make_config(completed_phase="step1"))
        manager = build_manager(journal, store)

        manager.prepare(make_config())

        assert journal == ["execute:step2", "execute:step3"]
        assert store.written_phases == ["step2", "step3"]

    def test_resume_uses_stored_configuration(self, journal):
        """Test the persisted record replaces the requested parameters."""
        store = MonitoringStore(make_config(completed_phase="step1", release_label="stored-1.0"))
        manager = build_manager(journal, store)

        result = manager.prepare(make_config(release_label="requested-1.0"))

        assert result.release_label == "stored-1.0"

    def test_already_completed_runs_nothing(self, journal):
        """Test a completed preparation is a no-op."""
        store = MonitoringStore(make_config(completed_phase="step3"))
        manager = build_manager(journal, store)

        result = manager.prepare(make_config())

        assert journal == []
        assert store.written_phases == []
        assert result.completed_phase == "step3"

    def test_no_resume_starts_from_first_phase(self, journal):
        """Test resume=False ignores the stored record."""
        store = MonitoringStore(make_config(completed_phase="step2"))
        manager = build_manager(journal, store)

        manager.prepare(make_config(completed_phase="step2"), resume=False)

        assert journal == ["execute:step1", "execute:step2", "execute:step3"]
        assert store.written_phases == ["step1", "step2", "step3"]

    def test_no_resume_does_not_mutate_caller_config(self, journal):
        """Test resume=False works on a copy of the requested configuration."""
        config = make_config(completed_phase="step2")
        manager = build_manager(journal, MonitoringStore())

        manager.prepare(config, resume=False)

        assert config.completed_phase == "step2"

    def test_resume_without_record_uses_requested_marker(self, journal):
        """Test a requested completed phase is honored when nothing is stored."""
        store = MonitoringStore()
        manager = build_manager(journal, store)

        manager.prepare(make_config(completed_phase="step2"))

        assert journal == ["execute:step3"]

    def test_unknown_completed_phase_starts_over(self, journal):
        """Test an unrecognized marker is treated as no progress."""
        store = MonitoringStore(make_config(completed_phase="retired-phase"))
        manager = build_manager(journal, store)

        manager.prepare(make_config())

        assert journal == ["execute:step1", "execute:step2", "execute:step3"]

    def test_dry_run_simulates_phases(self, journal):
        """Test dry run calls simulate and still checkpoints progress."""
        store = MonitoringStore()
        manager = build_manager(journal, store)

        manager.prepare(make_config(), dry_run=True)

        assert journal == ["simulate:step1", "simulate:step2", "simulate:step3"]
        assert store.written_phases == ["step1", "step2", "step3"]

    def test_failing_phase_stops_and_keeps_checkpoint(self, journal):
        """Test a phase failure propagates and leaves the earlier checkpoint."""
        store = MonitoringStore()
        manager = build_manager(journal, store, failing="step2")

        with pytest.raises(ReleaseFailureError, match="step2 failed"):
            manager.prepare(make_config())

        assert journal == ["execute:step1", "execute:step2"]
        assert store.written_phases == ["step1"]
        assert store.records["org.example:demo"].completed_phase == "step1"

    def test_rerun_after_failure_repeats_failed_phase(self, journal):
        """Test resuming after a failure starts with the failed phase."""
        store = MonitoringStore()
        with pytest.raises(ReleaseFailureError):
            build_manager(journal, store, failing="step2").prepare(make_config())
        journal.clear()

        build_manager(journal, store).prepare(make_config())

        assert journal == ["execute:step2", "execute:step3"]

    def test_missing_phase_implementation(self, journal):
        """Test a phase name without implementation raises an execution error."""
        store = MonitoringStore()
        manager = build_manager(journal, store, implemented=["step1", "step3"])

        with pytest.raises(ReleaseExecutionError, match="Unable to find phase 'step2' to execute"):
            manager.prepare(make_config())

        assert journal == ["execute:step1"]
        assert store.written_phases == ["step1"]

    def test_store_write_failure(self, journal):
        """Test a failed checkpoint write is reported as an execution error."""
        store = MonitoringStore()
        cause = ConfigurationStoreError("disk full")
        store.write = Mock(side_effect=cause)
        manager = build_manager(journal, store)

        with pytest.raises(ReleaseExecutionError) as exc_info:
            manager.prepare(make_config())

        assert exc_info.value.message == (
            "Error writing release configuration after completing phase 'step1'"
        )
        assert exc_info.value.cause is cause
        assert journal == ["execute:step1"]

    def test_store_read_failure(self, journal):
        """Test an unreadable record is reported as an execution error."""
        store = MonitoringStore()
        store.read = Mock(side_effect=ConfigurationStoreError("corrupt"))
        manager = build_manager(journal, store)

        with pytest.raises(ReleaseExecutionError, match="Error reading stored configuration"):
            manager.prepare(make_config())

        assert journal == []

    def test_status_returns_stored_record(self, journal):
        """Test status reports the persisted record, or None."""
        store = MonitoringStore()
        manager = build_manager(journal, store)

        assert manager.status(make_config()) is None

        manager.prepare(make_config())
        assert manager.status(make_config()).completed_phase == "step3"

    def test_unreadable_record_is_execution_error(self, journal, tmp_path):
        """Test a record the store cannot load stops preparation before any phase."""
        store = FileConfigurationStore(tmp_path)
        payload = {"configuration": {"group_id": "org.example", "artifact_id": "demo"}}
        payload["configuration"]["completed_phase"] = 3
        store.record_path(make_config()).write_text(json.dumps(payload))
        manager = build_manager(journal, store)

        with pytest.raises(ReleaseExecutionError, match="Error reading stored configuration"):
            manager.prepare(make_config())

        assert journal == []



class TestPerform:
    """Tests for ReleaseManager.perform."""

    def test_perform_after_prepare(self, journal, provider, maven, tmp_path):
        """Test perform checks out the label, builds, and cleans up."""
        store = MonitoringStore(
            make_config(completed_phase="step3", additional_arguments="-Dfoo=bar")
        )
        manager = build_manager(journal, store, provider=provider, maven=maven)
        checkout = tmp_path / "checkout"

        manager.perform(make_config(), checkout, "deploy")

        provider.checkout.assert_called_once()
        repository, fileset, tag = provider.checkout.call_args[0]
        assert repository.url == "https://example.com/demo.git"
        assert fileset.basedir == checkout
        assert tag == "demo-1.0"
        maven.execute_goals.assert_called_once_with(
            checkout, "deploy", True, "pom.xml", "-Dfoo=bar -DperformRelease=true"
        )
        assert store.records == {}
        assert store.deleted == ["org.example:demo"]
        assert journal == ["clean:step1", "clean:step2", "clean:step3"]

    def test_perform_without_release_profile(self, journal, provider, maven, tmp_path):
        """Test the release profile argument is omitted when disabled."""
        store = MonitoringStore(make_config(completed_phase="step3"))
        manager = build_manager(journal, store, provider=provider, maven=maven)

        manager.perform(make_config(), tmp_path / "checkout", "deploy", use_release_profile=False)

        assert maven.execute_goals.call_args[0][4] is None

    def test_perform_without_record_uses_requested_config(
        self, journal, provider, maven, tmp_path
    ):
        """Test perform from a tag with no prepared record."""
        manager = build_manager(journal, MonitoringStore(), provider=provider, maven=maven)

        manager.perform(make_config(release_label="demo-0.9"), tmp_path / "checkout", "deploy")

        assert provider.checkout.call_args[0][2] == "demo-0.9"
        maven.execute_goals.assert_called_once()

    def test_perform_rejects_incomplete_preparation(self, journal, provider, maven, tmp_path):
        """Test perform refuses to run after an interrupted prepare."""
        store = MonitoringStore(make_config(completed_phase="step2"))
        manager = build_manager(journal, store, provider=provider, maven=maven)

        with pytest.raises(ReleaseFailureError, match="stopped mid-way"):
            manager.perform(make_config(), tmp_path / "checkout", "deploy")

        provider.checkout.assert_not_called()
        maven.execute_goals.assert_not_called()
        assert "org.example:demo" in store.records

    def test_perform_replaces_existing_checkout(self, journal, provider, maven, tmp_path):
        """Test a stale checkout directory is removed first."""
        checkout = tmp_path / "checkout"
        checkout.mkdir()
        (checkout / "stale.txt").write_text("old")
        store = MonitoringStore(make_config(completed_phase="step3"))
        manager = build_manager(journal, store, provider=provider, maven=maven)

        manager.perform(make_config(), checkout, "deploy")

        assert checkout.is_dir()
        assert not (checkout / "stale.txt").exists()

    def test_perform_invalid_scm_url(self, journal, provider, maven, tmp_path):
        """Test an invalid SCM URL surfaces its validation messages."""
        store = MonitoringStore(make_config(completed_phase="step3", scm_source_url="bogus"))
        manager = build_manager(journal, store, provider=provider, maven=maven)

        with pytest.raises(ReleaseScmRepositoryError) as exc_info:
            manager.perform(make_config(), tmp_path / "checkout", "deploy")

        assert exc_info.value.validation_messages
        maven.execute_goals.assert_not_called()

    def test_perform_unknown_scm_provider(self, journal, provider, maven, tmp_path):
        """Test a URL for an unregistered provider is an execution error."""
        store = MonitoringStore(
            make_config(completed_phase="step3", scm_source_url="scm:svn:https://x/repo")
        )
        manager = build_manager(journal, store, provider=provider, maven=maven)

        with pytest.raises(ReleaseExecutionError, match="Unable to configure SCM repository"):
            manager.perform(make_config(), tmp_path / "checkout", "deploy")

    def test_perform_checkout_failure(self, journal, provider, maven, tmp_path):
        """Test an unsuccessful checkout result raises a command error."""
        provider.checkout.return_value = CheckOutScmResult(
            success=False, provider_message="clone failed", command_output="fatal: not found"
        )
        store = MonitoringStore(make_config(completed_phase="step3"))
        manager = build_manager(journal, store, provider=provider, maven=maven)

        with pytest.raises(ReleaseScmCommandError) as exc_info:
            manager.perform(make_config(), tmp_path / "checkout", "deploy")

        assert exc_info.value.message == "Unable to checkout from SCM"
        assert "fatal: not found" in str(exc_info.value)
        maven.execute_goals.assert_not_called()
        assert "org.example:demo" in store.records

    def test_perform_checkout_error(self, journal, provider, maven, tmp_path):
        """Test a provider exception during checkout is wrapped."""
        provider.checkout.side_effect = ScmError("git command not found")
        store = MonitoringStore(make_config(completed_phase="step3"))
        manager = build_manager(journal, store, provider=provider, maven=maven)

        with pytest.raises(ReleaseExecutionError, match="checkout process"):
            manager.perform(make_config(), tmp_path / "checkout", "deploy")

    def test_perform_build_failure(self, journal, provider, maven, tmp_path):
        """Test a failed release build is wrapped and the record is kept."""
        maven.execute_goals.side_effect = MavenExecutorError("Maven execution failed", 1)
        store = MonitoringStore(make_config(completed_phase="step3"))
        manager = build_manager(journal, store, provider=provider, maven=maven)

        with pytest.raises(ReleaseExecutionError, match="Error executing Maven"):
            manager.perform(make_config(), tmp_path / "checkout", "deploy")

        assert "org.example:demo" in store.records
        assert journal == []

    def test_perform_refuses_working_directory(self, journal, provider, maven, tmp_path):
        """Test the working copy is never wiped as a checkout directory."""
        project = make_project(tmp_path)
        config = make_config(working_directory=str(project))
        store = MonitoringStore(config.model_copy(update={"completed_phase": "step3"}))
        manager = build_manager(journal, store, provider=provider, maven=maven)

        with pytest.raises(ReleaseFailureError, match="Refusing to check out"):
            manager.perform(config, project, "deploy")

        assert (project / "pom.xml").read_text() == POM
        provider.checkout.assert_not_called()
        maven.execute_goals.assert_not_called()

    def test_perform_refuses_parent_of_working_directory(
        self, journal, provider, maven, tmp_path
    ):
        """Test a directory containing the working copy is never wiped."""
        project = make_project(tmp_path)
        config = make_config(working_directory=str(project))
        store = MonitoringStore(config.model_copy(update={"completed_phase": "step3"}))
        manager = build_manager(journal, store, provider=provider, maven=maven)

        with pytest.raises(ReleaseFailureError, match="Refusing to check out"):
            manager.perform(config, tmp_path, "deploy")

        assert (project / "pom.xml").exists()
        provider.checkout.assert_not_called()

    def test_perform_checkout_below_working_directory(
        self, journal, provider, maven, tmp_path
    ):
        """Test the usual target/checkout directory inside the working copy is allowed."""
        project = make_project(tmp_path)
        config = make_config(working_directory=str(project))
        store = MonitoringStore(config.model_copy(update={"completed_phase": "step3"}))
        manager = build_manager(journal, store, provider=provider, maven=maven)
        checkout = project / "target" / "checkout"

        manager.perform(config, checkout, "deploy")

        assert checkout.is_dir()
        assert (project / "pom.xml").exists()
        maven.execute_goals.assert_called_once()



class TestClean:
    """Tests for ReleaseManager.clean."""

    def test_clean_deletes_record_and_cleans_phases(self, journal):
        """Test clean removes the record and calls every phase's clean."""
        store = MonitoringStore(make_config(completed_phase="step2"))
        manager = build_manager(journal, store)

        manager.clean(make_config())

        assert store.records == {}
        assert journal == ["clean:step1", "clean:step2", "clean:step3"]

    def test_clean_without_record(self, journal):
        """Test clean succeeds when nothing was stored."""
        manager = build_manager(journal, MonitoringStore())

        manager.clean(make_config())

        assert journal == ["clean:step1", "clean:step2", "clean:step3"]

    def test_clean_never_raises(self, journal):
        """Test failures during clean are logged and the rest still runs."""
        store = MonitoringStore()
        store.delete = Mock(side_effect=ConfigurationStoreError("read-only"))
        manager = build_manager(journal, store)
        broken = manager.registry.get("step2")
        broken.clean = Mock(side_effect=OSError("permission denied"))

        manager.clean(make_config())

        assert journal == ["clean:step1", "clean:step3"]


class TestReleaseCoordinates:
    """Tests for coordinates taken from the POM when the request omits them."""

    def test_resume_finds_record_keyed_by_pom_coordinates(self, journal, tmp_path):
        """Test a failed run resumes when the same coordinate-less request is repeated."""
        project = make_project(tmp_path)
        state = tmp_path / "state"
        store = FileConfigurationStore(state)
        requested = make_config(group_id=None, artifact_id=None, working_directory=str(project))

        with pytest.raises(ReleaseFailureError):
            build_manager(journal, store, failing="step2").prepare(requested)

        assert requested.key == "unknown:unknown"
        assert [p.name for p in state.iterdir()] == ["org.example.demo.release.json"]

        journal.clear()
        manager = build_manager(journal, store)
        result = manager.prepare(requested)

        assert journal == ["execute:step2", "execute:step3"]
        assert result.key == "org.example:demo"
        assert manager.status(requested).completed_phase == "step3"

        manager.clean(requested)

        assert list(state.iterdir()) == []

    def test_unreadable_pom_stops_prepare(self, journal, tmp_path):
        """Test missing coordinates with no POM fail before any phase runs."""
        store = MonitoringStore(journal=journal)
        manager = build_manager(journal, store)

        with pytest.raises(ReleaseFailureError, match="release coordinates"):
            manager.prepare(make_config(group_id=None, working_directory=str(tmp_path)))

        assert journal == []

    def test_clean_without_pom_still_cleans_phases(self, journal, tmp_path):
        """Test clean falls back to the request when the POM cannot be read."""
        store = MonitoringStore()
        manager = build_manager(journal, store)

        manager.clean(make_config(artifact_id=None, working_directory=str(tmp_path)))

        assert store.deleted == ["org.example:unknown"]
        assert journal == ["clean:step1", "clean:step2", "clean:step3"]
