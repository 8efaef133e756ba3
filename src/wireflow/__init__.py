# src/wireflow/__init__.py
"""
WireFlow — workflows reprodutíveis de IA com configuração em cascata.

Este pacote raiz define o namespace público do WireFlow, uma ferramenta
para declarar unidades de trabalho nomeadas ("workflows") baseadas em
arquivos, cujos parâmetros vêm de uma cascata de configuração e cuja
ordem de execução vem de um grafo explícito de dependências.

Princípios centrais:
    - A configuração efetiva de cada chave tem proveniência explícita
    - O grafo de dependências é um DAG validado antes de qualquer execução
    - Reexecução é incremental: apenas workflows com fingerprint alterado rodam
    - O estado persistido entre execuções é apenas o Execution Log

Arquitetura em alto nível:
    - core.config       → tiers, loader declarativo, resolução com proveniência
    - core.engine       → grafo, planner, staleness, scheduler e Engine
    - core.traceability → Execution Log persistido por workflow
    - cli               → superfície fina de linha de comando (click)

Limites explícitos:
    - Não contém o cliente HTTP do backend de modelos
    - Não converte documentos (PDF, Office, imagens)
    - Não executa ramos independentes em paralelo
"""

__version__ = "0.4.0"

__all__ = ["__version__"]
