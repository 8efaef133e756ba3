# tests/core/engine/test_engine_surfaces.py
"""
Testes de integração do Engine sobre um projeto em disco.

Este módulo exercita as três superfícies do Engine (`run`, `status`,
`show_config`) com workflows reais em `.workflow/run/<id>/`.

Os testes asseguram que:
- o cenário A; B → A; C → [A, B] executa na ordem [A, B, C] e,
  repetido, não executa nada
- `status` reporta pending / fresh / stale com motivo
- erros estruturais viram ErrorPayload (nada é executado)
- overrides de CLI valem apenas para o alvo
- `show_config` reporta o tier dono de cada chave

Decisões arquiteturais:
    - O Executor é o `RecordingExecutor` (nenhuma chamada a backend)
    - A configuração global é isolada pelo fixture autouse do conftest
"""

import pytest
import yaml

try:
    from wireflow.core.engine import Engine
    from wireflow.core.errors import (
        DEPENDENCY_CYCLE,
        DEPENDENCY_NOT_FOUND,
        EXECUTOR_FAILURE,
        MISSING_DEPENDENCY_OUTPUT,
        WORKFLOW_NOT_FOUND,
    )
    from wireflow.core.exceptions import WorkflowNotFoundError
except Exception as e:
    Engine = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"""Missing engine. Implement:
- src/wireflow/core/engine/engine.py (Engine.run, Engine.status, Engine.show_config)
Import error: {_IMPORT_ERR}
""")


@pytest.fixture
def abc_project(project, write_workflow):
    write_workflow(project, "A", task="collect sources")
    write_workflow(project, "B", task="summarize", config={"depends_on": ["A"]})
    write_workflow(project, "C", task="report", config={"depends_on": ["A", "B"]})
    return project


def test_run_executes_dependencies_first_then_nothing(abc_project, RecordingExecutor):
    """
    Verifica o cenário de referência de ponta a ponta.

    Invariantes:
        - Primeira run: A, B e C executam nessa ordem (A uma única vez)
        - Segunda run sem mudanças: nada executa, exit code 0
        - Registros ficam em `.workflow/run/<id>/execution.json`
    """
    _require_imports()
    executor = RecordingExecutor()
    engine = Engine(abc_project, executor=executor)

    first = engine.run("C")
    assert first.ok and first.exit_code == 0
    assert executor.calls == ["A", "B", "C"]
    for wid in "ABC":
        assert abc_project.execution_log_path(wid).is_file()

    second = engine.run("C")
    assert second.ok
    assert executor.calls == ["A", "B", "C"]
    assert second.execution.executed == []
    assert second.execution.skipped == ["A", "B", "C"]

    messages = [e["message"] for e in first.ctx.events]
    assert messages[0] == "Resolving dependencies..."
    assert "Execution order: A, B, C" in messages


def test_status_reports_pending_fresh_and_stale(abc_project, RecordingExecutor):
    _require_imports()
    engine = Engine(abc_project, executor=RecordingExecutor())

    assert [(s.workflow, s.label) for s in engine.status()] == [
        ("A", "pending"),
        ("B", "pending"),
        ("C", "pending"),
    ]

    engine.run("C")
    assert {s.workflow: s.label for s in engine.status()} == {"A": "fresh", "B": "fresh", "C": "fresh"}

    abc_project.task_file("A").write_text("collect more sources", encoding="utf-8")
    labels = {s.workflow: s.label for s in engine.status()}
    assert labels == {
        "A": "stale: task changed",
        "B": "stale: dependency changed",
        "C": "stale: dependency changed",
    }


def test_status_of_unknown_workflow_is_an_error_entry(project):
    _require_imports()
    (status,) = Engine(project).status("ghost")
    assert status.error.type == WORKFLOW_NOT_FOUND
    assert status.label.startswith("error:")


def test_unknown_target_returns_error_payload(project, RecordingExecutor):
    _require_imports()
    executor = RecordingExecutor()
    result = Engine(project, executor=executor).run("ghost")

    assert not result.ok
    assert result.exit_code == 1
    assert result.error.type == WORKFLOW_NOT_FOUND
    assert executor.calls == []


def test_cycle_aborts_before_execution(project, write_workflow, RecordingExecutor):
    """
    Verifica que um ciclo A → C → B → A é reportado com o caminho completo
    e que nenhum workflow executa.
    """
    _require_imports()
    write_workflow(project, "A", config={"depends_on": ["C"]})
    write_workflow(project, "B", config={"depends_on": ["A"]})
    write_workflow(project, "C", config={"depends_on": ["A", "B"]})
    executor = RecordingExecutor()

    result = Engine(project, executor=executor).run("A")

    assert result.error.type == DEPENDENCY_CYCLE
    assert result.error.details["cycle"] == ["A", "C", "B", "A"]
    assert result.error.message == "Circular dependency detected: A -> C -> B -> A"
    assert executor.calls == []


def test_missing_dependency_names_declaring_workflow(project, write_workflow, RecordingExecutor):
    _require_imports()
    write_workflow(project, "B", config={"depends_on": ["missing"]})
    result = Engine(project, executor=RecordingExecutor()).run("B")

    assert result.error.type == DEPENDENCY_NOT_FOUND
    assert result.error.details == {"workflow": "B", "dependency": "missing"}
    assert result.ctx.events[-1]["level"] == "error"


def test_no_auto_deps_and_executor_failure_are_payloads(abc_project, RecordingExecutor):
    _require_imports()
    result = Engine(abc_project, executor=RecordingExecutor()).run("C", auto_deps=False)
    assert result.error.type == MISSING_DEPENDENCY_OUTPUT

    failing = RecordingExecutor(raise_for={"B"})
    result = Engine(abc_project, executor=failing).run("C")
    assert result.error.type == EXECUTOR_FAILURE
    assert result.error.details["workflow"] == "B"
    assert failing.calls == ["A", "B"]


def test_cli_overrides_apply_to_target_only(abc_project, RecordingExecutor):
    """
    Verifica o isolamento de configuração entre alvo e dependências.

    Invariantes:
        - O alvo B recebe o override de CLI (tier `cli`)
        - A dependência A é resolvida sem o override
        - Rodar B depois sem o override torna B stale por configuração
    """
    _require_imports()
    engine = Engine(abc_project, executor=RecordingExecutor())
    engine.run("B", cli_overrides={"model": "override-model"})

    rec_a = engine.log.read("A", abc_project.workflow_dir("A"))
    rec_b = engine.log.read("B", abc_project.workflow_dir("B"))
    assert rec_a.config["model"] == ""
    assert rec_b.config["model"] == "override-model"
    assert rec_b.config_sources["model"] == "cli"

    (status,) = engine.status("B")
    assert status.label == "stale: config changed"


def test_tier_warnings_reach_run_context(abc_project, RecordingExecutor):
    _require_imports()
    abc_project.workflow_config_file("A").write_text("depends_on: [unclosed\n", encoding="utf-8")

    result = Engine(abc_project, executor=RecordingExecutor()).run("A")

    assert result.ok
    assert len(result.ctx.warnings["A"]) == 1


def test_show_config_reports_provenance(project, write_workflow):
    _require_imports()
    project.config_file.write_text(yaml.safe_dump({"temperature": 0.2, "profile": "deep"}), encoding="utf-8")
    write_workflow(project, "A", config={"max_tokens": 500, "model": ""})
    engine = Engine(project)

    view = engine.show_config("A")
    rows = {r["key"]: (r["value"], r["source"]) for r in view.rows()}
    assert rows["temperature"] == (0.2, "project")
    assert rows["max_tokens"] == (500, "workflow")
    assert rows["model"] == ("", "builtin")
    assert view.effective_model == "claude-opus-4-5"

    project_view = engine.show_config()
    assert project_view.workflow is None
    assert project_view.config.sources()["max_tokens"] == "builtin"

    cli_view = engine.show_config("A", cli_overrides={"max_tokens": 42})
    assert cli_view.config.entry("max_tokens").source == "cli"

    with pytest.raises(WorkflowNotFoundError):
        engine.show_config("ghost")


def test_absolute_context_pattern_runs_and_tracks_changes(project, write_workflow, RecordingExecutor, tmp_path):
    """
    Verifica que um `context_pattern` absoluto (fora do projeto) entra no
    grafo como qualquer outro contexto: a run conclui e editar o arquivo
    torna o workflow stale.
    """
    _require_imports()
    shared = tmp_path / "shared"
    shared.mkdir()
    notes = shared / "notes.md"
    notes.write_text("v1", encoding="utf-8")
    write_workflow(project, "A", config={"context_pattern": f"{shared}/*.md"})
    engine = Engine(project, executor=RecordingExecutor())

    result = engine.run("A")
    assert result.ok
    assert result.execution.executed == ["A"]

    notes.write_text("v2", encoding="utf-8")
    (status,) = engine.status("A")
    assert status.label == "stale: context changed"


def test_status_label_without_verdict_or_error():
    _require_imports()
    from wireflow.core.engine import WorkflowStatus

    assert WorkflowStatus("A").label == "unknown"
