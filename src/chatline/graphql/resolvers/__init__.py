"""Resolver package for the GraphQL schema.

The root Query, Mutation and Subscription types import these functions
lazily; each one authenticates, talks to the store and maps ORM rows onto
GraphQL types.
"""
