"""
Pokedex Backend — API Routes Package
=====================================

Route Inventory:
    - pokemons.py: /pokemons CRUD (list, by id, by name, create, update, delete)
    - assets.py:   GET /assets/{path}  (stored images)
    - health.py:   GET /health          (store connectivity)

Routes are THIN: they read the request, call PokemonService, and return its
result. Business rules live in services/.
"""
