"""Cosmos DB connection string parsing.

Connection strings are turned into ``KEY=value`` lines, one per line and each
terminated by a newline, ready to be written to a ``.env`` file or pushed as
app settings.
"""
from typing import Dict
from urllib.parse import unquote

MONGO_CONNECTION_KEY = "COSMOSDB_CONNSTR"
MONGO_USER_KEY = "COSMOSDB_USER"
MONGO_PASSWORD_KEY = "COSMOSDB_PASSWORD"
SQL_URI_KEY = "COSMOSDB_URI"
SQL_PRIMARY_KEY = "COSMOSDB_PRIMARY_KEY"


def _format(fields: Dict[str, str]) -> str:
    return "".join(f"{key}={value}\n" for key, value in fields.items())


class ConnectionString:

    @staticmethod
    def parse_connection_string(connection_string: str) -> str:
        """Convert a raw Cosmos DB connection string into KEY=value lines."""
        if connection_string.startswith("mongodb"):
            return ConnectionString._parse_mongo(connection_string)
        return ConnectionString._parse_sql(connection_string)

    @staticmethod
    def _parse_mongo(connection_string: str) -> str:
        # mongodb://<user>:<password>@<host>:<port>/?<options>
        # Account keys may contain '/' and '+', so the URL is split by hand
        scheme, _, rest = connection_string.partition("://")
        credentials, at, location = rest.partition("@")
        if not at:
            credentials, location = "", rest
        user, _, password = credentials.partition(":")
        return _format({
            MONGO_CONNECTION_KEY: f"{scheme}://{location}",
            MONGO_USER_KEY: unquote(user),
            MONGO_PASSWORD_KEY: unquote(password),
        })

    @staticmethod
    def _parse_sql(connection_string: str) -> str:
        # AccountEndpoint=<uri>;AccountKey=<key>;
        fields = {}
        for segment in connection_string.split(";"):
            key, sep, value = segment.strip().partition("=")
            if sep:
                fields[key] = value
        return _format({
            SQL_URI_KEY: fields.get("AccountEndpoint", ""),
            SQL_PRIMARY_KEY: fields.get("AccountKey", ""),
        })
