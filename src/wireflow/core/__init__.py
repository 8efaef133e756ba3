# src/wireflow/core/__init__.py
"""
Core do WireFlow.

Este pacote reúne a implementação canônica das duas engrenagens centrais
da ferramenta:

    - config       → resolução de configuração por tiers, com pass-through
                     e rastreamento da proveniência de cada valor
    - engine       → construção do grafo de dependências, detecção de
                     ciclos, ordenação topológica, staleness e execução
                     incremental
    - traceability → Execution Log persistido por workflow

Princípios fundamentais:
    - Nenhuma decisão silenciosa: ciclos e dependências ausentes são fatais
    - Valores resolvidos são imutáveis depois de construídos
    - A mesma entrada sempre produz a mesma configuração e o mesmo plano

Limites explícitos:
    - Não fala com o backend de modelos (colaborador externo)
    - Não faz parsing de argumentos de linha de comando
"""
