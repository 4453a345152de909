"""
Infrastructure : persistance en mémoire et SQL, données de démo, registre des fournisseurs.
"""
