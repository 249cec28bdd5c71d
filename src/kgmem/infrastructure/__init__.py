"""Infrastructure layer: storage backends for the persisted graph.

Backends move raw text in and out of a resource. They know nothing about
entities or relations; decoding happens in :mod:`kgmem.domain.records`.
"""
