from pathlib import Path

import pytest

from kubecensus.core.config import RunMode, build_config, resolve_kubeconfig
from kubecensus.core.errors import ConfigError


@pytest.fixture
def kubeconfig(tmp_path):
    path = tmp_path / "kubeconfig"
    path.write_text("apiVersion: v1\nkind: Config\n")
    return str(path)


@pytest.mark.parametrize("flags", [
    {"must_gather": "mg", "kubeconfig": "k"},
    {"must_gather": "mg", "kubeconfig1": "k"},
    {"must_gather1": "a", "must_gather2": "b", "kubeconfig2": "k"},
    {"must_gather": "mg", "must_gather2": "b"},
    {"import_file": "all.yaml", "must_gather": "mg"},
])
def test_mutually_exclusive_flags(flags):
    with pytest.raises(ConfigError):
        build_config(**flags)


def test_must_gather_comparison_needs_both():
    with pytest.raises(ConfigError, match="requires both"):
        build_config(must_gather1="a")


def test_live_comparison_needs_both(kubeconfig):
    with pytest.raises(ConfigError, match="requires both"):
        build_config(compare=True, kubeconfig1=kubeconfig)


def test_mode_resolution(kubeconfig):
    assert build_config(import_file="x.yaml").mode is RunMode.IMPORT
    assert build_config(must_gather1="a", must_gather2="b").mode is RunMode.MUST_GATHER_COMPARISON
    assert build_config(must_gather="mg").mode is RunMode.MUST_GATHER
    assert build_config(kubeconfig1=kubeconfig, kubeconfig2=kubeconfig).mode is RunMode.LIVE_COMPARISON
    assert build_config(kubeconfig=kubeconfig, single_file=True).mode is RunMode.LIVE_SINGLE_FILE
    assert build_config(kubeconfig=kubeconfig).mode is RunMode.LIVE_DIRECTORY


def test_single_file_defaults_under_output(kubeconfig):
    cfg = build_config(kubeconfig=kubeconfig, output="out", single_file=True)
    assert cfg.output_file == Path("out") / "all-resources.yaml"

    cfg = build_config(kubeconfig=kubeconfig, file="snap.yaml")
    assert cfg.mode is RunMode.LIVE_SINGLE_FILE
    assert cfg.output_file == Path("snap.yaml")


def test_must_gather_single_file():
    cfg = build_config(must_gather="mg", single_file=True, output="out")
    assert cfg.single_file is True
    assert cfg.output_file == Path("out") / "all-resources.yaml"
    assert cfg.comparison_dir == Path("out") / "comparison"


def test_kubeconfig1_stands_in_for_kubeconfig(kubeconfig):
    cfg = build_config(kubeconfig1=kubeconfig)
    assert cfg.mode is RunMode.LIVE_DIRECTORY
    assert cfg.kubeconfig == Path(kubeconfig)


def test_kubeconfig_resolution_order(tmp_path, kubeconfig, monkeypatch):
    env_path = tmp_path / "env-config"
    env_path.write_text("")
    monkeypatch.setenv("KUBECONFIG", str(env_path))
    assert resolve_kubeconfig(kubeconfig) == Path(kubeconfig)
    assert resolve_kubeconfig(None) == env_path

    monkeypatch.delenv("KUBECONFIG")
    monkeypatch.setenv("HOME", str(tmp_path))
    with pytest.raises(ConfigError, match="not found"):
        resolve_kubeconfig(None)


def test_timeout_must_be_positive(kubeconfig):
    with pytest.raises(ConfigError):
        build_config(kubeconfig=kubeconfig, timeout=0)
