"""Level-up stat allocation oracle: clients, reply models, fallback allocator."""
