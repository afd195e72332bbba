import threading

import pytest

from depprobe.config import ConfigLoader
from depprobe.depprobe_types.exceptions import (ConfigError, DependencyNotFoundError,
                                                MissingDependenciesError)
from depprobe.probes import DependencyProbe, ProbeOrchestrator
from depprobe.utils import ProbeCache

DEPENDENCIES = """
dependencies:
  alpha:
    headers: [alpha.h]
    include_dirs: [/deps/include]
    libraries: [alpha]
    library_dirs: [/deps/lib]
    system_paths: false
  beta:
    prefix: BETA_LIB
    libraries: [beta]
    library_dirs: [/deps/lib]
    system_paths: false
  gamma:
    libraries: [gamma]
    library_dirs: [/deps/lib]
    required: true
    system_paths: false
probe_order: [alpha, beta]
"""


def _make_orchestrator(tmp_path, fs, conventions, logger, environ=None):
    (tmp_path / "dependencies.yaml").write_text(DEPENDENCIES)
    config = ConfigLoader(tmp_path)
    probe = DependencyProbe(cache=ProbeCache(), conventions=conventions,
                            logger=logger, path_exists=fs.exists)
    return ProbeOrchestrator(config=config, conventions=conventions, probe=probe,
                             logger=logger, environ=environ or {})


def test_probe_all_follows_probe_order(tmp_path, fake_fs, linux_conventions, logger):
    fs = fake_fs("/deps/include/alpha.h", "/deps/lib/libalpha.so")
    outcomes = _make_orchestrator(tmp_path, fs, linux_conventions, logger).probe_all()

    assert list(outcomes) == ["alpha", "beta"]
    prefix, alpha = outcomes["alpha"]
    assert prefix == "ALPHA"
    assert alpha.found is True
    assert alpha.library_path == "/deps/lib/libalpha.so"
    assert outcomes["beta"][0] == "BETA_LIB"
    assert outcomes["beta"][1].found is False


def test_missing_required_dependency_stops_the_run(tmp_path, fake_fs, linux_conventions, logger):
    fs = fake_fs()
    orchestrator = _make_orchestrator(tmp_path, fs, linux_conventions, logger)

    with pytest.raises(DependencyNotFoundError) as excinfo:
        orchestrator.probe_all(names=["gamma", "alpha"])

    assert excinfo.value.name == "gamma"
    assert not orchestrator.probe.cache.contains("alpha")


def test_continue_on_error_probes_the_rest_then_raises(tmp_path, fake_fs, linux_conventions, logger):
    fs = fake_fs()
    orchestrator = _make_orchestrator(tmp_path, fs, linux_conventions, logger)

    with pytest.raises(MissingDependenciesError) as excinfo:
        orchestrator.probe_all(names=["gamma", "alpha"], continue_on_error=True)

    assert orchestrator.probe.cache.contains("alpha")
    assert excinfo.value.names == ["gamma"]
    assert list(excinfo.value.outcomes) == ["alpha"]


def test_continue_on_error_keeps_found_outcomes(tmp_path, fake_fs, linux_conventions, logger):
    fs = fake_fs("/deps/include/alpha.h", "/deps/lib/libalpha.so")
    orchestrator = _make_orchestrator(tmp_path, fs, linux_conventions, logger)

    with pytest.raises(MissingDependenciesError) as excinfo:
        orchestrator.probe_all(names=["alpha", "gamma", "beta"], continue_on_error=True)

    outcomes = excinfo.value.outcomes
    assert list(outcomes) == ["alpha", "beta"]
    assert outcomes["alpha"][1].found is True
    assert outcomes["alpha"][1].library_path == "/deps/lib/libalpha.so"
    assert outcomes["beta"][0] == "BETA_LIB"
    assert logger.at("error")[-1] == "Missing required dependencies: gamma"


def test_parallel_run_with_missing_required_dependency(tmp_path, fake_fs, linux_conventions, logger):
    fs = fake_fs("/deps/include/alpha.h", "/deps/lib/libalpha.so")
    orchestrator = _make_orchestrator(tmp_path, fs, linux_conventions, logger)

    with pytest.raises(DependencyNotFoundError) as excinfo:
        orchestrator.probe_all(names=["gamma", "alpha", "beta", "gamma"], parallel=True)

    # Every submitted future is collected before the error surfaces
    assert excinfo.value.name == "gamma"
    assert excinfo.value.names == ["gamma"]
    assert orchestrator.probe.cache.contains("alpha")
    assert orchestrator.probe.cache.contains("beta")
    assert list(excinfo.value.outcomes) == ["alpha", "beta"]
    assert excinfo.value.outcomes["alpha"][1].found is True


def test_unknown_dependency_is_rejected_before_probing(tmp_path, fake_fs, linux_conventions, logger):
    fs = fake_fs()
    orchestrator = _make_orchestrator(tmp_path, fs, linux_conventions, logger)

    with pytest.raises(ConfigError):
        orchestrator.probe_all(names=["alpha", "nope"])
    assert fs.checks == []


def test_override_variables_reach_the_probe(tmp_path, fake_fs, linux_conventions, logger):
    fs = fake_fs()
    orchestrator = _make_orchestrator(tmp_path, fs, linux_conventions, logger,
                                      environ={"BETA_LIB_LIBRARY": "/vendored/libbeta.a"})
    result = orchestrator.probe_dependency("beta")

    assert result.found is True
    assert result.library_path == "/vendored/libbeta.a"
    assert fs.checks == []


def test_parallel_probing_checks_each_key_once(tmp_path, fake_fs, linux_conventions, logger):
    fs = fake_fs("/deps/include/alpha.h", "/deps/lib/libalpha.so")
    lock = threading.Lock()
    counting = []

    def exists(path):
        with lock:
            counting.append(path)
        return path in fs.paths

    orchestrator = _make_orchestrator(tmp_path, fs, linux_conventions, logger)
    orchestrator.probe.path_exists = exists

    outcomes = orchestrator.probe_all(names=["alpha", "beta", "alpha", "beta"], parallel=True)
    sequential_checks = len(counting)

    assert list(outcomes) == ["alpha", "beta"]
    assert outcomes["alpha"][1].found is True

    # Re-probing the same keys touches nothing
    orchestrator.probe_all(names=["alpha", "beta"], parallel=True)
    assert len(counting) == sequential_checks
    assert counting.count("/deps/include/alpha.h") == 1
