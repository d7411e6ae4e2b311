"""API client for the PromptShop REST API."""

from __future__ import annotations

from typing import Any

import httpx


class ShopClient:
    """HTTP client wrapping the PromptShop API endpoints used by the CLI."""

    def __init__(self, base_url: str = "http://localhost:8500", timeout: float = 30) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(base_url=f"{self.base_url}/api/v1", timeout=timeout)

    def _handle(self, resp: httpx.Response) -> Any:
        if resp.status_code >= 400:
            try:
                detail = resp.json().get("detail", resp.text)
            except ValueError:
                detail = resp.text
            raise RuntimeError(f"API error ({resp.status_code}): {detail}")
        if resp.status_code == 204:
            return None
        return resp.json()

    # --- Projects ---

    def list_projects(self) -> list[dict]:
        return self._handle(self._client.get("/projects"))

    def create_project(self, name: str) -> dict:
        return self._handle(self._client.post("/projects", json={"name": name}))

    def get_project(self, project_id: str) -> dict:
        return self._handle(self._client.get(f"/projects/{project_id}"))

    def delete_project(self, project_id: str) -> None:
        self._handle(self._client.delete(f"/projects/{project_id}"))

    # --- Library ---

    def list_entities(self, project_id: str, kind: str) -> list[dict]:
        return self._handle(self._client.get(f"/projects/{project_id}/library/{kind}"))

    # --- Prompts ---

    def list_prompts(self, project_id: str) -> list[dict]:
        return self._handle(self._client.get(f"/projects/{project_id}/prompts"))

    def create_prompt(self, project_id: str, title: str, prompt_request: dict | None = None) -> dict:
        body: dict[str, Any] = {"title": title}
        if prompt_request is not None:
            body["prompt_request"] = prompt_request
        return self._handle(self._client.post(f"/projects/{project_id}/prompts", json=body))

    def get_prompt(self, project_id: str, prompt_id: str) -> dict:
        return self._handle(self._client.get(f"/projects/{project_id}/prompts/{prompt_id}"))

    def validate(self, project_id: str, prompt_id: str) -> dict:
        return self._handle(self._client.post(f"/projects/{project_id}/prompts/{prompt_id}/validate"))

    def compile(self, project_id: str, prompt_id: str, mode: str | None = None) -> dict:
        params = {"mode": mode} if mode else None
        return self._handle(
            self._client.post(f"/projects/{project_id}/prompts/{prompt_id}/compile", params=params)
        )

    # --- History ---

    def save_history(self, project_id: str, prompt_id: str, note: str | None = None) -> dict:
        return self._handle(
            self._client.post(f"/projects/{project_id}/prompts/{prompt_id}/history", json={"note": note})
        )

    def restore_history(self, project_id: str, prompt_id: str, history_id: str) -> dict:
        return self._handle(
            self._client.post(f"/projects/{project_id}/prompts/{prompt_id}/history/{history_id}/restore")
        )
