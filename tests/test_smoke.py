# tests/test_smoke.py
"""
Testes de sanidade estrutural (smoke tests) do WireFlow.

Este módulo contém testes mínimos cujo único objetivo é garantir que:
- o pacote `wireflow` é importável
- o ambiente de testes (pytest) está funcional

Limites explícitos:
    - Não testar lógica de negócio
    - Não acumular asserts funcionais
"""


def test_smoke():
    """
    Smoke test mínimo do repositório.

    Garante que o pacote principal e seus subpacotes são importáveis e
    expõem a versão, antes de qualquer teste de domínio.
    """
    import wireflow
    import wireflow.core.config
    import wireflow.core.engine

    assert wireflow.__version__
