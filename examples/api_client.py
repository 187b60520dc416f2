#!/usr/bin/env python3
"""
Example client for the XSD Outline API.

Loads a schema into a running server, prints its outline with occurrence
badges, and resolves a node back to its source line.

    python -m xsd_outline.run_server &
    python examples/api_client.py /work/schemas/order.xsd
"""

import sys
from typing import Dict, List, Optional

import httpx


class XSDOutlineClient:
    """Client for interacting with the XSD Outline API."""

    def __init__(self, base_url: str = "http://localhost:8000"):
        """Initialize the client with the API base URL."""
        self.base_url = base_url
        self.client = httpx.Client(base_url=base_url, timeout=30.0)
        self.etag_cache: Dict[str, str] = {}
        self.tree_cache: Dict[str, List[Dict]] = {}

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - close the client."""
        self.client.close()

    def get_health(self) -> Dict:
        """Check API health status."""
        response = self.client.get("/health")
        response.raise_for_status()
        return response.json()

    def load(self, path: str, force: bool = False) -> Dict:
        """Make ``path`` the server's active document."""
        response = self.client.post("/outline", json={"path": path, "force": force})
        response.raise_for_status()
        return response.json()

    def get_tree(self, locator: Optional[str] = None, depth: int = 1) -> List[Dict]:
        """
        Get rendered tree items, reusing the cached copy while unchanged.

        Args:
            locator: Node to expand (roots when omitted)
            depth: Levels to expand (1-10)

        Returns:
            List of tree item dicts
        """
        key = f"{locator}:{depth}"
        params: Dict[str, object] = {"depth": depth}
        if locator:
            params["locator"] = locator
        headers = {}
        if key in self.etag_cache:
            headers["If-None-Match"] = self.etag_cache[key]

        response = self.client.get("/tree", params=params, headers=headers)
        if response.status_code == 304:
            return self.tree_cache[key]
        response.raise_for_status()

        items = response.json()["items"]
        if "ETag" in response.headers:
            self.etag_cache[key] = response.headers["ETag"]
            self.tree_cache[key] = items
        return items

    def get_decoration(self, node_id: str) -> Optional[Dict]:
        """Occurrence badge / nillable hint for a rendered node, if any."""
        response = self.client.get("/decorations", params={"node_id": node_id})
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return response.json()

    def navigate(self, locator: str) -> Optional[Dict]:
        """Source location and zero-based line of ``locator``."""
        response = self.client.get("/navigate", params={"locator": locator})
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return response.json()

    def print_outline(self, items: List[Dict], indent: int = 0) -> None:
        """Print items recursively with their badges."""
        for item in items:
            line = f"{'  ' * indent}{'+' if item['collapsible'] else '-'} {item['label']}"
            if item["description"]:
                line += f" : {item['description']}"
            decoration = self.get_decoration(item["node_id"])
            if decoration and decoration.get("badge"):
                line += f" [{decoration['badge']}]"
            print(line)
            self.print_outline(item.get("children", []), indent + 1)


def main():
    """Demonstrate the API against a schema given on the command line."""
    if len(sys.argv) < 2:
        print("usage: api_client.py <schema.xsd>")
        return 1

    with XSDOutlineClient() as client:
        print("Health:", client.get_health()["status"])

        loaded = client.load(sys.argv[1])
        if not loaded["is_schema"]:
            print(f"{sys.argv[1]} is not an XML Schema document")
            return 1
        for problem in loaded["errors"]:
            print(f"warning: {problem}")

        items = client.get_tree(depth=3)
        client.print_outline(items)

        if items:
            target = client.navigate(items[0]["locator"])
            if target:
                print(f"\n{items[0]['label']} is defined at {target['location']}:{target['line'] + 1}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
