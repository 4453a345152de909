"""
TenantDesk - Backend multi-tenant de souscriptions, licences et facturation.

Architecture : Hexagonale (Ports et Adaptateurs)
- core/ : Couche domaine (entités, ports, objets valeur, exceptions)
- services/ : Couche application (traitement de listes, cas d'utilisation)
- adapters/ : Adaptateurs de services (traduction, autorisation, IDs) et CLI
- infrastructure/ : Persistance (mémoire, SQLModel) et registre des fournisseurs
- web/ : API JSON FastAPI
"""

__version__ = "0.1.0"
