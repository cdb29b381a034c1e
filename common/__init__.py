"""
Código compartilhado: utilitários de URI, modelos, transporte HTTP, logging e métricas.
"""
