# tests/conftest.py
"""
Fixtures compartilhados para testes do WireFlow.

Este módulo define fixtures reutilizáveis que fornecem:
- isolamento da configuração global do usuário (variáveis de ambiente)
- projetos WireFlow temporários em `tmp_path`
- fábricas de workflows (task + config.yaml) e de nós em memória
- um Executor de teste que registra chamadas e grava saídas reais

Decisões arquiteturais:
    - Toda fixture com filesystem usa `tmp_path` (nada fora dele é tocado)
    - Imports do core são feitos de forma lazy dentro das fixtures para
      que falhas de import apareçam nos testes com mensagem clara
    - O Executor de teste usa duck typing (não herda de nada)

Invariantes:
    - Nenhuma fixture lê `~/.config/wireflow`
    - Nenhuma fixture chama rede ou backend de modelos

Limites explícitos:
    - Não valida comportamento do core (isso é papel dos testes)
"""

from pathlib import Path

import pytest
import yaml


@pytest.fixture(autouse=True)
def isolated_global_config(tmp_path_factory, monkeypatch):
    """
    Aponta a configuração global para um diretório vazio e exclusivo.

    Garante que a máquina de quem roda os testes (e seu
    `~/.config/wireflow/config.yaml`) nunca influencie a cascata.

    Returns:
        Path: diretório usado como `$WIREFLOW_CONFIG_DIR`.
    """
    cfg_dir = tmp_path_factory.mktemp("global-config")
    monkeypatch.setenv("WIREFLOW_CONFIG_DIR", str(cfg_dir))
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    monkeypatch.delenv("WIREFLOW_PROMPT_PREFIX", raising=False)
    return cfg_dir


@pytest.fixture
def project(tmp_path):
    """Projeto WireFlow recém-inicializado em `tmp_path/proj`."""
    from wireflow.core.project import init_project

    return init_project(tmp_path / "proj")


@pytest.fixture
def write_workflow():
    """
    Fixture factory que cria um workflow em disco.

    Uso:
        write_workflow(project, "B", task="...", config={"depends_on": ["A"]})

    O `config` é serializado com `yaml.safe_dump`; quando omitido, o
    workflow fica com o template padrão (apenas comentários).
    """
    from wireflow.core.project import new_workflow

    def _write(project, name, task="task", config=None):
        if not project.workflow_dir(name).exists():
            new_workflow(project, name, task)
        else:
            project.task_file(name).write_text(task, encoding="utf-8")
        if config is not None:
            project.workflow_config_file(name).write_text(
                yaml.safe_dump(config, sort_keys=False), encoding="utf-8"
            )
        return project.workflow_dir(name)

    return _write


@pytest.fixture
def make_node():
    """
    Fixture factory de WorkflowNode em memória (sem filesystem).

    A configuração informada é tratada como tier `workflow` e resolvida
    sobre os defaults builtin.
    """
    from wireflow.core.config import Tier, TierRef, TierSource, resolve_all
    from wireflow.core.engine.graph import WorkflowNode

    def _make(node_id, depends_on=(), config=None, **kwargs):
        values = dict(config or {})
        resolved = resolve_all([TierSource(ref=TierRef(Tier.WORKFLOW), values=values)])
        return WorkflowNode(id=node_id, config=resolved, depends_on=tuple(depends_on), **kwargs)

    return _make


@pytest.fixture
def RecordingExecutor():
    """
    Fixture factory que fornece um Executor duck-typed para testes.

    A instância:
    - registra, em ordem, os ids executados (`calls`)
    - grava `output.md` no diretório do workflow (quando houver)
    - falha (exceção ou outcome sem sucesso) para ids configurados
    """
    from wireflow.core.engine.executor import ExecutionOutcome

    class _RecordingExecutor:
        def __init__(self, *, raise_for=(), fail_for=()):
            self.calls = []
            self.raise_for = set(raise_for)
            self.fail_for = set(fail_for)

        def execute(self, node, ctx):
            self.calls.append(node.id)
            if node.id in self.raise_for:
                raise RuntimeError(f"boom in {node.id}")
            if node.id in self.fail_for:
                return ExecutionOutcome(success=False, error_detail="backend returned 500")
            if node.workflow_dir is None:
                return ExecutionOutcome(success=True)
            out = Path(node.workflow_dir) / "output.md"
            out.parent.mkdir(parents=True, exist_ok=True)
            out.write_text(f"output of {node.id}", encoding="utf-8")
            return ExecutionOutcome(success=True, output_path=out)

    return _RecordingExecutor
