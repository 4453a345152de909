"""
Couche domaine (core).

Contient les entités métier, ports (interfaces abstraites), objets valeur et exceptions.
Cette couche n'a AUCUNE dépendance vers l'infrastructure (adapters, frameworks, BDD).

Sous-packages :
- entities/ : Entités métier (Subscription, License, Invoice, Workspace, ...)
- ports/ : Interfaces abstraites définissant les contrats pour les adaptateurs
- value_objects/ : Objets valeur immutables (requêtes de liste, contexte d'appel)
"""
