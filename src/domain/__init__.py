"""
Job Board Domain Layer

Immutable entities, value objects and events of the job board client.
All domain objects are frozen dataclasses with ZERO external dependencies.
"""
