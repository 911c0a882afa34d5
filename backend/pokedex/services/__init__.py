"""
Pokedex Backend — Services Layer
=================================

Service Inventory:
    - IdentityAllocator (identity.py): max(id) + 1 with retry on id conflict
    - merge_patch (merge.py): field-level merge for partial updates
    - paginate (pagination.py): skip/limit and the navigation envelope
    - ImageResolver (image_resolver.py): best-effort image storage per record
    - PokemonService (pokemon_service.py): orchestrates the CRUD operations
"""
