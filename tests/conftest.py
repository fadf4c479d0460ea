"""Pytest configuration and fixtures for apigraph tests."""

import pytest


@pytest.fixture
def users_document():
    """Two paths sharing the /users segment."""
    return {
        "openapi": "3.0.0",
        "paths": {
            "/users": {
                "get": {"summary": "List users"},
            },
            "/users/{id}": {
                "get": {"summary": "Get user"},
                "delete": {"summary": "Delete user"},
            },
        },
    }


@pytest.fixture
def schema_document():
    """UserInput consumed by POST and produced by GET."""
    return {
        "paths": {
            "/users": {
                "post": {
                    "summary": "Create user",
                    "requestBody": {
                        "content": {
                            "application/json": {"schema": {"$ref": "#/components/schemas/UserInput"}},
                        },
                    },
                    "responses": {"201": {"description": "Created"}},
                },
                "get": {
                    "responses": {
                        "200": {
                            "content": {
                                "application/json": {"schema": {"$ref": "#/components/schemas/UserInput"}},
                            },
                        },
                    },
                },
            },
        },
        "components": {
            "schemas": {
                "UserInput": {
                    "type": "object",
                    "properties": {
                        "name": {"type": "string"},
                        "age": {"type": "integer"},
                        "tags": {},
                    },
                },
            },
        },
    }


@pytest.fixture
def petstore_document():
    """Larger document with nesting, shared schemas and several top-level paths."""
    return {
        "paths": {
            "/pets": {
                "get": {
                    "summary": "List pets",
                    "responses": {
                        "200": {
                            "content": {
                                "application/json": {
                                    "schema": {"type": "array", "items": {"$ref": "#/components/schemas/Pet"}},
                                },
                            },
                        },
                    },
                },
                "post": {
                    "requestBody": {
                        "content": {"application/json": {"schema": {"$ref": "#/components/schemas/NewPet"}}},
                    },
                    "responses": {
                        "201": {"content": {"application/json": {"schema": {"$ref": "#/components/schemas/Pet"}}}},
                    },
                },
            },
            "/pets/{petId}": {
                "get": {
                    "responses": {
                        "200": {"content": {"application/json": {"schema": {"$ref": "#/components/schemas/Pet"}}}},
                        "404": {"content": {"application/json": {"schema": {"$ref": "#/components/schemas/Error"}}}},
                    },
                },
            },
            "/pets/{petId}/photos": {
                "put": {},
            },
            "/stores/{storeId}/inventory": {
                "get": {
                    "responses": {
                        "default": {
                            "content": {"application/json": {"schema": {"$ref": "#/components/schemas/Error"}}},
                        },
                    },
                },
            },
            "/health": {
                "get": {"summary": "Health check"},
            },
        },
        "components": {
            "schemas": {
                "Pet": {"properties": {"id": {"type": "integer"}, "name": {"type": "string"}}},
                "NewPet": {"properties": {"name": {"type": "string"}}},
                "Error": {"properties": {"code": {"type": "integer"}, "message": {"type": "string"}}},
            },
        },
    }
