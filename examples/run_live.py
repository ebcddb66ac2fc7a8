from __future__ import annotations

import argparse
import asyncio
import logging

from aerogen.config import GeminiConfig, SimulatorConfig, setup_logging
from aerogen.runtime import TurbineSimulator
from aerogen.scenario import ScenarioClient

logger = logging.getLogger("run_live")


async def watch(sim: TurbineSimulator, seconds: float, prompt: str | None) -> None:
    pending = None
    async with sim:
        if prompt:
            # Runs alongside the physics loop; the weather flips when it lands
            pending = asyncio.create_task(sim.request_scenario(prompt))

        for _ in range(int(seconds)):
            await asyncio.sleep(1.0)
            s = sim.stats
            print(
                f"{sim.weather.wind_speed:5.1f} m/s  {s.rpm:5.1f} rpm  {s.power_output:7.1f} kW  "
                f"{s.total_energy:7.3f} kWh  [{sim.operating_state().value}] {sim.status}"
            )

        if pending is not None and not pending.done():
            pending.cancel()
        if sim.client is not None:
            print("Insight:", await sim.request_analysis())


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the turbine simulator in the terminal.")
    parser.add_argument("--seconds", type=float, default=15.0)
    parser.add_argument("--prompt", default=None, help="free-text weather scenario for Gemini")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    setup_logging(args.log_level)

    cfg = GeminiConfig.from_env()
    client = ScenarioClient(cfg) if cfg.api_key else None
    if args.prompt and client is None:
        logger.warning("GEMINI_API_KEY not set; scenario requests will use the fallback weather")

    sim = TurbineSimulator(config=SimulatorConfig(seed=args.seed), client=client)
    try:
        asyncio.run(watch(sim, args.seconds, args.prompt))
    finally:
        if client is not None:
            client.close()


if __name__ == "__main__":
    main()
