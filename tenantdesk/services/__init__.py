"""
Application services layer.

- listing/ : generic list processing (filter, search, sort, paginate)
- usecases/ : use cases composing authorization, validation, enrichment,
  transactions and repositories

Services depend on ports (interfaces) from core/, never on concrete
implementations from adapters/ or infrastructure/.
"""
