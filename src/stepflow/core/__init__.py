# src/stepflow/core/__init__.py
"""
Core do stepflow.

Componentes principais:
    - config       → carregamento, merge, hashing e leitura tipada de configuração
    - pipeline     → contrato de Step, RunContext, Result, ExecResult e registry
    - engine       → executor sequencial e composições (chain, tx, race, usecase)
    - traceability → Manifest, Event Log e observabilidade opcional

Princípios fundamentais:
    - Nenhuma decisão silenciosa: todo comportamento é explícito e testado
    - Sem estado global mutável
    - Colaboradores externos (armazenamento, HTTP) ficam fora do core
"""
