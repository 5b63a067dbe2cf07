"""Service layer.

Application services orchestrate ports (repositories, session store, token
codec, credential verifier, clock) inside units of work. Import concrete
services from their subpackages, e.g.
:class:`vending.services.purchases.service.PurchaseService`.
"""
