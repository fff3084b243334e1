#!/usr/bin/env python3
"""Generate civic simulations with the LLM simulation generator.

The generated simulation is stored in the configured simulation repository
(CIVICSIM_STORAGE_BACKEND / CIVICSIM_SIMULATIONS_PATH) so it can be played
right away, or written to a JSON file with --output.

Usage:
    # Generate a beginner governance simulation
    python scripts/generate_simulation.py "A district allocating a new water budget"

    # Generate with custom settings
    python scripts/generate_simulation.py \\
        "Youth council debating a recycling programme" \\
        --topic environment \\
        --difficulty intermediate \\
        --steps 6 \\
        --output simulations/recycling.json

Exit codes:
    0: Success
    1: Generation fell back and --strict was given, or saving failed
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from civicsim.errors import TransientStorageError
from civicsim.generation import SimulationGenerator
from civicsim.models.preferences import Difficulty, GenerationPreferences, Topic
from civicsim.scenarios import BUILTIN_SIMULATIONS, SimulationRegistry
from civicsim.storage import get_simulation_repository

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(
        description="Generate civic simulations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument("prompt", type=str, help="Description of the civic situation to simulate")
    parser.add_argument(
        "--topic",
        type=str,
        choices=[t.value for t in Topic],
        default=Topic.GOVERNANCE.value,
        help="Civic topic (default: governance)",
    )
    parser.add_argument(
        "--difficulty",
        type=str,
        choices=[d.value for d in Difficulty],
        default=Difficulty.BEGINNER.value,
        help="Difficulty level (default: beginner)",
    )
    parser.add_argument(
        "--steps",
        type=int,
        default=5,
        choices=range(1, 21),
        metavar="1-20",
        help="Number of decision points (default: 5)",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        default=None,
        help="Write the simulation to this JSON file instead of the repository",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail instead of saving the fallback simulation when generation fails",
    )
    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Only output JSON, no progress messages",
    )

    args = parser.parse_args()

    if args.quiet:
        logging.disable(logging.CRITICAL)

    preferences = GenerationPreferences(
        topic=Topic(args.topic),
        difficulty=Difficulty(args.difficulty),
        question_count=args.steps,
    )
    logger.info(f"Generating {args.difficulty} {args.topic} simulation with {args.steps} steps")

    result = asyncio.run(SimulationGenerator().generate(args.prompt, preferences))
    if result.used_fallback:
        logger.warning(f"Generation fell back to the built-in template: {result.error}")
        if args.strict:
            return 1

    simulation = result.simulation
    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with output_path.open("w") as f:
            json.dump(simulation.model_dump(mode="json"), f, indent=2)
        logger.info(f"Simulation saved to: {output_path}")
    else:
        registry = SimulationRegistry(BUILTIN_SIMULATIONS, get_simulation_repository())
        try:
            simulation = registry.add_generated(simulation)
        except TransientStorageError as e:
            logger.error(f"Could not store simulation: {e}")
            return 1
        logger.info(f"Simulation stored as {simulation.id}: {simulation.title}")

    if args.quiet:
        print(json.dumps(simulation.model_dump(mode="json"), indent=2))

    return 0


if __name__ == "__main__":
    sys.exit(main())
