#!/usr/bin/env python3
import argparse
import logging
import os

from jssp.runner import RunnerConfig, load_config, run


def main() -> None:
    parser = argparse.ArgumentParser(description="JSSP list scheduler (config only)")
    parser.add_argument(
        "--config",
        default="config.yaml",
        help="Path to a YAML/JSON configuration file",
    )
    args = parser.parse_args()

    if not os.path.isfile(args.config):
        raise FileNotFoundError(f"Config file not found: {args.config}")

    config = RunnerConfig.from_dict(load_config(args.config))
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    run(config)


if __name__ == "__main__":
    main()
