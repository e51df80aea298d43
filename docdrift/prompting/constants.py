"""Shared prompt text for digest and document generation."""

from __future__ import annotations

DIGEST_PRIORITY_PATHS: tuple[str, ...] = (
    "package.json",
    "README.md",
    "readme.md",
    "next.config.js",
    "next.config.mjs",
    "prisma/schema.prisma",
)

DIGEST_SYSTEM_PROMPT = (
    "You are a senior engineer summarizing a repository for documentation generation. "
    "Respond ONLY with valid JSON matching the requested schema."
)

DIGEST_INSTRUCTIONS = "Summarize the repository into a structured digest for downstream doc generation."

DIGEST_SCHEMA: dict[str, object] = {
    "repoPurpose": "short description of what this repo does",
    "setup": "step-by-step setup and run instructions",
    "envVars": [
        {
            "name": "NAME",
            "required": True,
            "purpose": "what it does",
            "example": "value example if known",
        }
    ],
    "keyModules": [{"path": "path/to/file", "summary": "what it does"}],
    "apiRoutes": [{"path": "/api/foo", "methods": ["GET"], "summary": "purpose"}],
    "dataModels": [{"name": "Model or entity name", "summary": "what fields mean"}],
    "gotchas": ["important constraints, limits, or warnings"],
}

WRITER_INTRO = "You are an expert technical writer improving an existing repository documentation file."

README_STYLE_GUIDE = "\n".join(
    [
        "README style guide (use this structure and level of detail):",
        "- Start with: `# <ProjectName>` then a short tagline line, then a 1-2 paragraph overview.",
        "- Include these sections when applicable (prefer these headings/ordering):",
        "  - `## Features` (bulleted, bold labels)",
        "  - `## Tech Stack` (bulleted)",
        "  - `## Getting Started` with `### Prerequisites`, `### Installation`, and a clear local run flow",
        "  - `### Environment Variables` with a single `env` code block and brief inline comments",
        "  - `### Database Setup (Prisma)` if Prisma/DB is used (commands like `npx prisma db push`, `npx prisma studio`)",
        "  - `## Mock Mode` if supported (what it does/doesn't do, where fixtures live)",
        "  - `## Project Structure` with a tree code block",
        "  - `## Routes` as a table",
        "  - `## API Endpoints` grouped by area (Auth/Projects/Scans/etc.)",
        "  - `## Security Notes` with explicit warnings about secrets",
        "  - `## Development` (common npm scripts)",
        "  - `## Docker` (build + run examples + compose notes)",
        "  - `## Cron / Scheduled Scans` if relevant",
        "  - `## License`",
        "- Prefer concrete commands, paths, and endpoint lists derived from repo context; omit anything you can't support.",
        "- Never include real secrets/tokens; use placeholders and keep the security warning.",
    ]
)

README_RULES = "\n".join(
    [
        "Rules (critical):",
        "- Rewrite the README to match the provided style guide and structure.",
        "- Preserve factual details from existingMarkdown and repo context.",
        "- If content is missing, add concise placeholders instead of inventing facts.",
        "- Do NOT include YAML frontmatter.",
        "- Output ONLY the final Markdown content (no code fences, no explanations).",
        "- Never include real secrets/tokens; use placeholders.",
    ]
)

DEFAULT_RULES = "\n".join(
    [
        "Rules (critical):",
        "- You will be given existingMarkdown (may be empty). If it is already complete enough, return it unchanged.",
        "- Otherwise, make minimal, targeted edits. Preserve structure, headings, and useful details.",
        "- Do NOT delete large sections unless they are clearly wrong/outdated AND you replace them with better content.",
        "- Prefer adding/adjusting over rewriting.",
        "- Do not include YAML frontmatter.",
        "- Output ONLY the final Markdown content (no code fences, no explanations).",
        "- Avoid hallucinating; if unsure, omit rather than invent.",
    ]
)


__all__ = [
    "DEFAULT_RULES",
    "DIGEST_INSTRUCTIONS",
    "DIGEST_PRIORITY_PATHS",
    "DIGEST_SCHEMA",
    "DIGEST_SYSTEM_PROMPT",
    "README_RULES",
    "README_STYLE_GUIDE",
    "WRITER_INTRO",
]
