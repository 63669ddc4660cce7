"""Core: dominio, contratos, configuración y servicios.

No conoce la CLI; solo depende de adaptadores a través del contexto
`core.environment.Environment`.
"""
