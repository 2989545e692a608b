# scripts/generate_readme.py
"""
Genera el README sin pasar por la API.

    python scripts/generate_readme.py --repo-name "My Badges" --username monalisa --own pull-shark
    python scripts/generate_readme.py --quick --no-hero --out BADGES.md
"""
import sys
import argparse
import asyncio
from pathlib import Path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from badgeguide.core.settings import DEFAULT_REPO_NAME
from badgeguide.domain.gallery.service import toggle_ownership
from badgeguide.domain.pipeline import service as pipeline
from badgeguide.domain.pipeline.session import WizardSession
from badgeguide.domain.pipeline.steps import GenerationStep, STATUS_MESSAGES
from badgeguide.schemas.session import AppConfig

def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Generate a GitHub achievements README.")
    p.add_argument("--repo-name", default=DEFAULT_REPO_NAME)
    p.add_argument("--username", default="")
    p.add_argument("--no-hero", action="store_true", help="skip the hero image")
    p.add_argument("--no-search", action="store_true", help="skip search grounding (--quick only)")
    p.add_argument("--quick", action="store_true", help="direct flow: no catalog scan")
    p.add_argument("--own", action="append", default=[], metavar="BADGE_ID",
                   help="flip ownership of a scanned badge (repeatable)")
    p.add_argument("--out", default="README.md")
    return p.parse_args(argv)

def _progress(s: WizardSession):
    print(f"[{s.step.value}] {STATUS_MESSAGES[s.step]}")

async def run(args) -> WizardSession:
    config = AppConfig(
        repoName=args.repo_name,
        githubUsername=args.username,
        includeHeroImage=not args.no_hero,
        includeSearchData=not args.no_search,
    )
    session = WizardSession(config=config)
    if args.quick:
        return await pipeline.generate_direct(session, _progress)

    session = await pipeline.scan(session, _progress)
    if session.step is not GenerationStep.GALLERY:
        print(session.alert or "Scan failed")
        return session
    known = {b.id for b in session.badges}
    for badge_id in args.own:
        if badge_id in known:
            session = toggle_ownership(session, badge_id)
        else:
            print(f"badge desconocido, se ignora: {badge_id}")
    return await pipeline.generate(session, _progress)

def main(argv=None) -> int:
    args = parse_args(argv)
    session = asyncio.run(run(args))
    if session.step is not GenerationStep.DONE:
        return 1
    out = Path(args.out)
    out.write_text(session.markdown, encoding="utf-8")
    print(f"README escrito en {out} ({len(session.markdown)} chars)")
    return 0

if __name__ == "__main__":
    sys.exit(main())
