import json

import pytest

from depprobe.depprobe_types.exceptions import MissingDependenciesError
from depprobe.main import ProbeSystem, main


def _write_project(tmp_path, required=False, options=""):
    include = tmp_path / "deps" / "include"
    lib = tmp_path / "deps" / "lib"
    include.mkdir(parents=True)
    lib.mkdir(parents=True)
    (include / "foo.h").write_text("")
    (lib / "libfoo.so").write_text("")

    config_dir = tmp_path / "config"
    config_dir.mkdir()
    (config_dir / "dependencies.yaml").write_text(f"""
dependencies:
  foo:
    headers: [foo.h]
    include_dirs: [{include}]
    libraries: [foo]
    library_dirs: [{lib}]
    system_paths: false
  bar:
    libraries: [bar]
    library_dirs: [{lib}]
    required: {str(required).lower()}
    system_paths: false
{options}""")
    return config_dir, include, lib


def _run(*argv):
    with pytest.raises(SystemExit) as excinfo:
        main(list(argv))
    return excinfo.value.code


def _base_args(tmp_path, config_dir):
    return ["--config-dir", str(config_dir),
            "--cache-file", str(tmp_path / "cache.json"),
            "--platform", "linux"]


def test_probe_prints_json(tmp_path, capsys):
    config_dir, include, lib = _write_project(tmp_path)

    code = _run("probe", *_base_args(tmp_path, config_dir), "-f", "json")

    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["foo"]["found"] is True
    assert payload["foo"]["header_path"] == str(include)
    assert payload["foo"]["library_path"] == str(lib / "libfoo.so")
    assert payload["bar"]["variables"]["BAR_FOUND"] == "FALSE"


def test_missing_required_dependency_exits_non_zero(tmp_path, capsys):
    config_dir, _, _ = _write_project(tmp_path, required=True)

    code = _run("probe", *_base_args(tmp_path, config_dir))

    assert code == 1
    assert "Could NOT find bar" in capsys.readouterr().err
    # The aborted session leaves nothing behind
    assert not (tmp_path / "cache.json").exists()


def test_definition_overrides_library(tmp_path, capsys):
    config_dir, _, _ = _write_project(tmp_path, required=True)

    code = _run("probe", *_base_args(tmp_path, config_dir),
                "-D", "BAR_LIBRARY:FILEPATH=/vendored/libbar.a")

    assert code == 0
    assert 'set(BAR_LIBRARIES "/vendored/libbar.a" CACHE FILEPATH' in capsys.readouterr().out


def test_cache_persists_between_runs_until_cleaned(tmp_path, capsys):
    config_dir, _, lib = _write_project(tmp_path)
    args = _base_args(tmp_path, config_dir)

    assert _run("probe", *args, "--dep", "foo", "-f", "json") == 0
    capsys.readouterr()
    (lib / "libfoo.so").unlink()

    assert _run("probe", *args, "--dep", "foo", "-f", "json") == 0
    assert json.loads(capsys.readouterr().out)["foo"]["found"] is True

    assert _run("clean", *args, "--dep", "foo") == 0
    assert _run("probe", *args, "--dep", "foo", "-f", "json") == 0
    assert json.loads(capsys.readouterr().out)["foo"]["found"] is False


def test_no_cache_does_not_write_cache_file(tmp_path):
    config_dir, _, _ = _write_project(tmp_path)

    assert _run("probe", *_base_args(tmp_path, config_dir), "--no-cache") == 0
    assert not (tmp_path / "cache.json").exists()


def test_output_file(tmp_path):
    config_dir, _, _ = _write_project(tmp_path)
    output = tmp_path / "out" / "deps.sh"

    assert _run("probe", *_base_args(tmp_path, config_dir), "-f", "env", "-o", str(output)) == 0
    assert "export FOO_FOUND=1" in output.read_text()


def test_clean_requires_selection(tmp_path):
    config_dir, _, _ = _write_project(tmp_path)
    assert _run("clean", *_base_args(tmp_path, config_dir)) == 2


def test_malformed_definition(tmp_path):
    config_dir, _, _ = _write_project(tmp_path)
    assert _run("probe", *_base_args(tmp_path, config_dir), "-D", "NOVALUE") == 2


def test_bad_config_dir_exits_with_error(tmp_path, capsys):
    bad = tmp_path / "bad"
    bad.mkdir()
    (bad / "dependencies.yaml").write_text("dependencies: [oops]\n")

    assert _run("probe", "--config-dir", str(bad), "--platform", "linux") == 1
    assert "Error initializing depprobe" in capsys.readouterr().err


def test_info_lists_dependencies(tmp_path, capsys):
    config_dir, _, _ = _write_project(tmp_path)

    assert _run("info", *_base_args(tmp_path, config_dir)) == 0
    out = capsys.readouterr().out
    assert "Platform: linux" in out
    assert "foo" in out
    assert "[?] Not probed" in out


def test_probe_system_without_persistent_cache(tmp_path, logger):
    config_dir, _, _ = _write_project(tmp_path)
    ps = ProbeSystem(root_dir=tmp_path, config_dir=config_dir, platform="linux",
                     use_cache=False, environ={}, logger=logger)

    outcomes = ps.probe_dependencies()

    assert ps.cache.cache_file is None
    assert [name for name in outcomes] == ["foo", "bar"]
    assert outcomes["foo"][1].found is True
    assert "1/2 dependencies found" in logger.at("info")


def test_definition_given_after_a_cached_run_replaces_the_cached_result(tmp_path, capsys):
    config_dir, _, _ = _write_project(tmp_path)
    args = _base_args(tmp_path, config_dir)

    assert _run("probe", *args, "-f", "json") == 0
    assert json.loads(capsys.readouterr().out)["bar"]["found"] is False

    assert _run("probe", *args, "-f", "json", "-D", "BAR_LIBRARY=/vendored/libbar.a") == 0
    bar = json.loads(capsys.readouterr().out)["bar"]
    assert bar["found"] is True
    assert bar["library_path"] == "/vendored/libbar.a"

    # The overridden outcome is what later runs replay
    assert _run("probe", *args, "-f", "json") == 0
    assert json.loads(capsys.readouterr().out)["bar"]["library_path"] == "/vendored/libbar.a"


def test_continue_on_error_exports_found_dependencies_and_fails(tmp_path, capsys):
    config_dir, include, _ = _write_project(tmp_path, required=True,
                                            options="options:\n  continue_on_error: true\n")

    code = _run("probe", *_base_args(tmp_path, config_dir), "-f", "json", "--dep", "bar", "--dep", "foo")

    assert code == 1
    captured = capsys.readouterr()
    payload = json.loads(captured.out)
    assert list(payload) == ["foo"]
    assert payload["foo"]["header_path"] == str(include)
    assert "Could NOT find bar" in captured.err
    cached = json.loads((tmp_path / "cache.json").read_text())
    assert set(cached["entries"]) == {"bar", "foo"}


def test_probe_system_keeps_outcomes_when_continuing_past_a_miss(tmp_path, logger):
    config_dir, _, lib = _write_project(tmp_path, required=True,
                                        options="options:\n  continue_on_error: true\n")
    ps = ProbeSystem(root_dir=tmp_path, config_dir=config_dir, platform="linux",
                     cache_file=tmp_path / "c.json", environ={}, logger=logger)

    with pytest.raises(MissingDependenciesError) as excinfo:
        ps.probe_dependencies(deps=["bar", "foo"])

    assert excinfo.value.names == ["bar"]
    assert excinfo.value.outcomes["foo"][1].library_path == str(lib / "libfoo.so")
    assert (tmp_path / "c.json").exists()


def test_unknown_dependency_is_reported_through_the_logger(tmp_path, capsys):
    config_dir, _, _ = _write_project(tmp_path)

    assert _run("probe", *_base_args(tmp_path, config_dir), "--dep", "nope") == 1
    assert "depprobe error: Unknown dependency: nope" in capsys.readouterr().err
