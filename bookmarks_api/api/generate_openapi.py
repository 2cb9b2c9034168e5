"""Write the OpenAPI document to interfaces/openapi.json (all REST routes are under /api/v1)."""
import json
import os

from bookmarks_api.api.main import app

openapi_schema = app.openapi()

# Form actions are not described by request models; document the cookie they rely on.
openapi_schema["x-session-cookie"] = {
    "name": "AUTH_COOKIE_NAME (default bookmarks_auth)",
    "value": "URL-encoded JSON {token, model}",
    "refreshed": "on every response",
}

output_dir = "interfaces"
os.makedirs(output_dir, exist_ok=True)
output_path = os.path.join(output_dir, "openapi.json")

with open(output_path, "w") as f:
    json.dump(openapi_schema, f, indent=2)
