# badgeguide/ai/prompts.py
import json
from typing import List, Optional

from badgeguide.schemas.badge import Badge

NO_SEARCH_CONTEXT = "Use your internal knowledge about GitHub Achievements."

HERO_IMAGE_PROMPT = (
    "A premium, dark-mode inspired 3D visualization of GitHub Achievement badges "
    "(Mars, Quickdraw, Pull Shark) floating in space, hero header style, digital art, "
    "high quality, neon accents, wide aspect ratio."
)

GENERAL_SEARCH_PROMPT = (
    "Search the web for the current, complete list of GitHub Achievements and profile badges. "
    "For each one give its name, what it is awarded for, its tiers (e.g. x2/x16/x32/x64 or "
    "Bronze/Silver/Gold) and whether it is retired. Include recent additions and removals."
)

# Esquema de respuesta para el catálogo (formato REST de Gemini)
BADGE_CATALOG_SCHEMA = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "id": {"type": "STRING"},
            "name": {"type": "STRING"},
            "emoji": {"type": "STRING"},
            "description": {"type": "STRING"},
            "category": {"type": "STRING", "enum": ["Earnable", "Retired", "Highlight", "Custom"]},
            "rarity": {"type": "STRING", "enum": ["Common", "Rare", "Epic", "Legendary"]},
            "howToEarn": {"type": "STRING"},
            "tiers": {"type": "ARRAY", "items": {"type": "STRING"}},
            "isOwned": {"type": "BOOLEAN"},
        },
        "required": ["id", "name", "emoji", "description", "category", "rarity",
                     "howToEarn", "tiers", "isOwned"],
    },
}

def build_catalog_prompt(username: str) -> str:
    if username:
        ownership = (
            f"Also, based on your knowledge, mark 'isOwned' as true if the user \"{username}\" "
            "is likely to have it (or if it's a common default). If unsure, set false."
        )
    else:
        ownership = "Set isOwned to false for all."
    return f"""
Generate a comprehensive JSON list of GitHub Achievements and Profile Badges.
Include standard achievements (Galaxy Brain, Pull Shark, YOLO, Quickdraw, Starstruck, Pair Extraordinaire),
retired badges (Arctic Code Vault, Mars 2020), and profile highlights (Pro, Developer Program, GitHub Star).

For each badge, provide:
- A unique kebab-case id (e.g. "pull-shark")
- Name
- A representative Emoji
- Description
- Category (Earnable, Retired, Highlight)
- Rarity (Common, Rare, Epic, Legendary - estimate this based on difficulty)
- How to Earn (short strategy)
- Tiers (e.g. "Bronze, Silver, Gold" or "x1, x10, x100", or "Single Tier" if none)

{ownership}
"""

def build_user_search_prompt(username: str) -> str:
    return (
        f"Search the web for the public GitHub profile of \"{username}\" and list the GitHub "
        "Achievements and profile highlights that this user displays, with tiers when visible. "
        "If nothing can be found, say so briefly."
    )

def _hero_line(hero_image_url: Optional[str]) -> str:
    if not hero_image_url:
        return ""
    return f"IMPORTANT: At the very top of the README, insert this image: ![Hero]({hero_image_url})"

_STRUCTURE_RULES = """
### Core Design & Structure Mandates:

1. **Hero Header:** Start with a large, centered title using emojis and stylish markdown. Add a concise, motivational tagline{owned_hint}.
2. **Visual Navigation (TOC):** Create a "✨ Quick Navigation" section.
3. **User Progress Section:**
   - Title: "## 👤 My Badge Collection"
   - Display the owned badges as a row of badges/emojis with names. Make it look like a trophy case.

4. **Premium Table Design for Active Badges (Earnable):**
   - Title: "## 🎯 Earnable Achievements"
   - **CRITICAL: TABLE STYLING**: Use a Markdown table with strictly aligned columns.
   - Columns:
     1. **Badge** (Use `&nbsp;` to separate Emoji and Name, e.g., `🦈&nbsp;**Pull Shark**`)
     2. **Description** (Keep concise, max 10 words)
     3. **Tiers** (Center aligned)
     4. **Strategy** (Brief actionable tip)
   - Formatting: Ensure the table uses standard markdown pipe syntax.

5. **Retired & Legacy Badges:**
   - Title: "## 📜 The Hall of Legends (Retired)"
   - A simpler, compact table or list for retired badges.

6. **Interactive & Clear Guides:**
   - Title: "## 🛠️ Detailed Earning Guides"
   - Pick the top 3 most difficult Earnable badges and create collapsible <details> sections with specific steps.

7. **FAQ:** Format as "Q: ... A: ...".

Output raw Markdown code only. Do not wrap in markdown code blocks.
"""

def badge_data_context(badges: List[Badge]) -> dict:
    owned = [b for b in badges if b.isOwned]
    earnable = [b for b in badges if b.category == "Earnable" and not b.isOwned]
    retired = [b for b in badges if b.category == "Retired"]
    return {
        "owned": [b.name for b in owned],
        "earnable": [{"name": b.name, "emoji": b.emoji, "desc": b.description,
                      "tiers": list(b.tiers), "guide": b.howToEarn} for b in earnable],
        "retired": [{"name": b.name, "emoji": b.emoji} for b in retired],
    }

def build_readme_prompt(badges: List[Badge], repo_name: str, hero_image_url: Optional[str]) -> str:
    data = badge_data_context(badges)
    owned_hint = f" and a visually distinct badges count (Owned: {len(data['owned'])})"
    return f"""
You are an expert technical writer and UI designer.
Create a stunning, visually engaging, and exceptionally well-organized README.md file for a GitHub repository titled "{repo_name}".

The design must feel premium, modern, and effortless to navigate.

{_hero_line(hero_image_url)}

Here is the STRUCTURED DATA representing the user's current badge status and the library of badges to display:
{json.dumps(data, ensure_ascii=False, indent=2)}
{_STRUCTURE_RULES.format(owned_hint=owned_hint)}"""

def build_context_readme_prompt(repo_name: str, username: str, context: str,
                                hero_image_url: Optional[str]) -> str:
    who = (f"The guide is written for the GitHub user \"{username}\"; use the context to infer "
           "which badges they already own.") if username else \
          "No GitHub user was given; leave the collection section as a template the reader can fill in."
    return f"""
You are an expert technical writer and UI designer.
Create a stunning, visually engaging, and exceptionally well-organized README.md file for a GitHub repository titled "{repo_name}".

The design must feel premium, modern, and effortless to navigate.

{_hero_line(hero_image_url)}

{who}

CONTEXT ABOUT GITHUB ACHIEVEMENTS:
{context}
{_STRUCTURE_RULES.format(owned_hint="")}"""
