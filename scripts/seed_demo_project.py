#!/usr/bin/env python3
"""Seed a demo project (characters, wardrobes and one ready-to-compile prompt) into PromptShop.

Usage:
    python scripts/seed_demo_project.py
    python scripts/seed_demo_project.py --base-url http://localhost:8500
"""

from __future__ import annotations

import argparse
import sys

import httpx

CHARACTERS = [
    {
        "ui_name": "Milo",
        "injected_text": (
            "Milo, a small red fox with a white-tipped tail, amber eyes and a notch in his left ear"
        ),
        "helper_fields": {"species": "red fox", "signature_traits": "notched left ear"},
    },
    {
        "ui_name": "Juniper",
        "injected_text": "Juniper, a tall grey heron with a long yellow beak and round spectacles",
        "helper_fields": {"species": "grey heron", "signature_traits": "round spectacles"},
    },
]

WARDROBES = [
    {
        "ui_name": "Yellow Raincoat",
        "outfit_text": "bright yellow raincoat with wooden toggles and rolled sleeves",
        "bans_text": "no hats, no scarves",
    },
    {
        "ui_name": "Librarian Cardigan",
        "outfit_text": "moss-green knit cardigan with leather elbow patches",
    },
]


def _check(resp: httpx.Response, what: str) -> dict:
    if resp.status_code >= 400:
        print(f"  FAILED {what}: {resp.status_code} {resp.text}", file=sys.stderr)
        sys.exit(1)
    return resp.json()


def seed_via_api(base_url: str, name: str) -> None:
    """Create the demo project by calling the PromptShop API."""
    with httpx.Client(base_url=f"{base_url}/api/v1", timeout=10.0) as client:
        project = _check(client.post("/projects", json={"name": name}), "project")
        project_id = project["id"]
        print(f"  Created project: {project_id}")

        characters = []
        for data in CHARACTERS:
            characters.append(
                _check(client.post(f"/projects/{project_id}/library/characters", json=data), data["ui_name"])
            )
        wardrobes = []
        for data in WARDROBES:
            wardrobes.append(
                _check(client.post(f"/projects/{project_id}/library/wardrobes", json=data), data["ui_name"])
            )
        print(f"  Added {len(characters)} characters and {len(wardrobes)} wardrobes")

        look = project["looks"][0]
        draft = {
            "aspect_ratio": "2x3",
            "output_mode": "compact",
            "scene_heart": "Milo shows Juniper a hand-drawn map in a candle-lit library",
            "cast": [
                {"character_id": characters[0]["id"], "wardrobe_id": wardrobes[0]["id"]},
                {"character_id": characters[1]["id"], "wardrobe_id": wardrobes[1]["id"]},
            ],
            "framing": "medium",
            "lens_mode": "auto",
            "look_family_id": look["id"],
            "environment_anchors": ["tall oak bookshelves", "brass candle holder", "rolled parchment maps"],
            "mechanic_lock": "Candle light falls across the map and onto Milo's outstretched paw",
            "focus_target": "Milo's paw on the map and Juniper's spectacles",
            "selected_micro_textures": [project["micro_textures"][0]["id"]],
            "selected_micro_details": [project["micro_details"][0]["id"]],
        }
        prompt = _check(
            client.post(f"/projects/{project_id}/prompts", json={"title": "The Map", "prompt_request": draft}),
            "prompt",
        )
        print(f"  Created prompt: {prompt['id']} (look: {look['ui_name']})")


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed a demo project into PromptShop")
    parser.add_argument(
        "--base-url",
        default="http://localhost:8500",
        help="PromptShop base URL (default: http://localhost:8500)",
    )
    parser.add_argument("--name", default="Demo: Fox & Heron", help="Project name")
    args = parser.parse_args()

    print(f"Seeding demo project to {args.base_url} ...")
    seed_via_api(args.base_url, args.name)
    print("Done.")


if __name__ == "__main__":
    main()
