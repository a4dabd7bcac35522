# tests/e2e/test_generate_pipeline.py
"""
Testes end-to-end do pipeline de geração (Engine + Steps canônicos).

Os testes asseguram que:
- `generate` produz build, visão por node, manifest e report
- `validate` não escreve nada além do que for pedido
- errors de distribuição tornam o run malsucedido e a unidade não é renderizada
- warnings nunca alteram o resultado
- dependências falhas propagam SKIPPED
"""

import json

from atlas_xds.core.config.loader import default_config
from atlas_xds.core.errors import INVALID_WEIGHT_SUM, UNKNOWN_LB_METHOD
from atlas_xds.core.pipeline.types import StepStatus
from atlas_xds.runner import COMMAND_VALIDATE, pipeline_config, run_pipeline


def _config(input_tree, tmp_path, **kwargs):
    return pipeline_config(
        default_config(),
        input_dir=input_tree,
        output_dir=tmp_path / "build",
        **kwargs,
    )


def test_generate_writes_build_nodes_manifest_and_report(input_tree, tmp_path):
    config = _config(input_tree, tmp_path, nodes_dir=tmp_path / "nodes-and-resources")

    summary = run_pipeline(config, run_id="run-e2e", manifest_dir=tmp_path / "build")

    assert summary.success
    assert summary.units == 3
    assert summary.rendered == 3
    assert summary.error_count == 0
    assert all(r.status == StepStatus.SUCCESS for r in summary.steps.values())

    cds = json.loads((tmp_path / "build" / "edge" / "services" / "api" / "us-east-1" / "cds.json").read_text())
    assert cds["name"] == "edge.us-east-1.api"
    assert cds["connect_timeout"] == "2s"
    assert cds["lb_policy"] == "ROUND_ROBIN"

    eds = json.loads((tmp_path / "build" / "edge" / "services" / "api" / "us-east-1" / "eds.json").read_text())
    groups = eds["resources"][0]["endpoints"]
    assert [(g["locality"]["region"], g["load_balancing_weight"]) for g in groups] == [
        ("us-east-1", 60),
        ("us-west-2", 40),
    ]

    assert (tmp_path / "nodes-and-resources" / "nodes" / "edge.eu-west-1.json").is_file()

    manifest = json.loads((tmp_path / "build" / "manifest.json").read_text())
    assert manifest["run"]["run_id"] == "run-e2e"
    assert manifest["summary"]["success"] is True
    assert manifest["inputs"]["registry_hash"]
    assert set(manifest["steps"]) == {
        "ingest.profiles",
        "config.resolve",
        "validate.distribution",
        "render.resources",
        "export.build",
        "aggregate.nodes",
        "export.nodes",
    }

    report = (tmp_path / "build" / "report.md").read_text()
    assert "run-e2e" in report


def test_generate_without_nodes_dir_skips_node_export(input_tree, tmp_path):
    summary = run_pipeline(_config(input_tree, tmp_path))

    assert summary.success
    assert summary.steps["aggregate.nodes"].status == StepStatus.SUCCESS
    assert summary.steps["export.nodes"].status == StepStatus.SKIPPED
    assert summary.run_id.startswith("run-")


def test_validate_command_runs_only_validation(input_tree, tmp_path):
    summary = run_pipeline(_config(input_tree, tmp_path), command=COMMAND_VALIDATE)

    assert summary.success
    assert list(summary.steps) == ["ingest.profiles", "config.resolve", "validate.distribution"]
    assert summary.rendered == 0
    assert not (tmp_path / "build").exists()


def test_weight_error_fails_run_and_skips_unit(input_tree, tmp_path, yaml_writer):
    yaml_writer(
        input_tree / "edge" / "services" / "api" / "us-east-1" / "profile.yaml",
        {"distribution": {"us-east-1": {"weight": 80}}},
    )

    summary = run_pipeline(_config(input_tree, tmp_path))

    assert not summary.success
    assert summary.units == 3
    assert summary.rendered == 2
    assert [f.type for f in summary.errors] == [INVALID_WEIGHT_SUM]
    assert summary.failed_units == {"edge/services/api/us-east-1": "validate"}
    assert not (tmp_path / "build" / "edge" / "services" / "api" / "us-east-1").exists()
    assert (tmp_path / "build" / "edge" / "services" / "api" / "us-west-2" / "cds.json").is_file()


def test_warnings_do_not_fail_run(input_tree, tmp_path, yaml_writer):
    yaml_writer(
        input_tree / "edge" / "services" / "auth" / "eu-west-1" / "profile.yaml",
        {"load_balancing_method": "FASTEST"},
    )

    summary = run_pipeline(_config(input_tree, tmp_path))

    assert summary.success
    assert [f.type for f in summary.warnings] == [UNKNOWN_LB_METHOD]
    assert summary.rendered == 3


def test_generate_single_target(input_tree, tmp_path):
    config = _config(input_tree, tmp_path, target={"role": "edge", "service": "api", "region": "us-west-2"})

    summary = run_pipeline(config)

    assert summary.success
    assert summary.units == 1
    assert (tmp_path / "build" / "edge" / "services" / "api" / "us-west-2" / "eds.json").is_file()
    assert not (tmp_path / "build" / "edge" / "services" / "auth").exists()


def test_missing_registry_fails_ingest_and_skips_rest(input_tree, tmp_path):
    (input_tree / "endpoints.yaml").unlink()

    summary = run_pipeline(_config(input_tree, tmp_path))

    assert not summary.success
    assert summary.units == 0
    assert summary.steps["ingest.profiles"].status == StepStatus.FAILED
    assert summary.steps["config.resolve"].status == StepStatus.SKIPPED
    assert summary.steps["export.build"].status == StepStatus.SKIPPED


def test_pipeline_config_does_not_mutate_input(tmp_path):
    base = default_config()

    effective = pipeline_config(base, input_dir=tmp_path, checks=["weights"])

    assert base["steps"] == {}
    assert effective["steps"]["validate.distribution"]["checks"] == ["weights"]
    assert effective["steps"]["export.nodes"]["enabled"] is False
