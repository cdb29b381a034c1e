"""
Configuração de métricas Prometheus para o cliente do store e o announcer.
"""
from prometheus_client import Counter, Histogram


# Métricas do cliente do key/value store
store_metrics = {
    "requests_total": Counter(
        "kvstore_requests_total",
        "Número total de requisições ao key/value store",
        ["method", "outcome"]
    ),
    "request_duration": Histogram(
        "kvstore_request_duration_seconds",
        "Duração das requisições ao key/value store",
        ["method"]
    )
}


# Métricas do announcer
announcer_metrics = {
    "ticks_total": Counter(
        "announce_ticks_total",
        "Número de execuções do announce por resultado",
        ["outcome"]
    )
}
