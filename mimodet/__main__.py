"""
Main entry point for MIMO detection simulations.
"""

import os
import argparse
from pathlib import Path

from mimodet.core.constellation import Modulation
from mimodet.detectors.config import DetectorConfig, KBestConfig
from mimodet.detectors.dispatch import validate_detectors
from mimodet.simulation.estimation import ChannelEstimator
from mimodet.simulation.simulator import (
    DEFAULT_DETECTORS,
    SimulationParameters,
    simulate_error_rates
)
from mimodet.utils.device_utils import select_device
from mimodet.utils.results import (
    create_results_directory,
    save_results_to_csv,
    save_simulation_parameters
)

def load_dotenv(env_path: str | None = None) -> None:
    """Load key=value pairs from a .env file into os.environ (existing keys win)."""
    path = Path(env_path) if env_path else Path.cwd() / ".env"
    if not path.exists():
        return
    with path.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" not in line:
                continue
            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            os.environ.setdefault(key, value)

def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Data detection in massive MU-MIMO: error-rate simulation")
    parser.add_argument("--run-id", type=int, default=int(os.getenv("RUN_ID", 0)), help="Seed of the randomness source")
    parser.add_argument("--mr", type=int, default=int(os.getenv("MR", 32)), help="Receive antennas")
    parser.add_argument("--mt", type=int, default=int(os.getenv("MT", 16)), help="Transmit antennas (not larger than MR)")
    parser.add_argument("--modulation", type=str, default=os.getenv("MODULATION", "QPSK"),
                        help="BPSK, QPSK, 16QAM or 64QAM")
    parser.add_argument("--trials", type=int, default=int(os.getenv("TRIALS", 10000)))
    parser.add_argument("--snr-start", type=int, default=int(os.getenv("SNR_START", 0)))
    parser.add_argument("--snr-end", type=int, default=int(os.getenv("SNR_END", 12)))
    parser.add_argument("--snr-step", type=int, default=int(os.getenv("SNR_STEP", 2)))
    parser.add_argument("--los", action="store_true", help="Use the line-of-sight channel model")
    parser.add_argument("--chest", type=str, default=os.getenv("CHEST", "PERF"), help="PERF, ML or BEACHES")
    parser.add_argument("--detectors", type=str, default=os.getenv("DETECTORS", ",".join(DEFAULT_DETECTORS)),
                        help="Comma-separated detector names")
    parser.add_argument("--kbest-k", type=int, default=int(os.getenv("KBEST_K", 5)))
    parser.add_argument("--results-dir", type=str, default=os.getenv("RESULTS_DIR", "results"))
    parser.add_argument("--dry-run", action="store_true", help="Print effective config and exit")
    parser.add_argument("--device", type=str, choices=["cpu", "cuda"],
                        help="Computation device (default: auto-select)")
    return parser.parse_args(argv)

def main(argv=None):
    """Main function for running MIMO detection simulations."""
    load_dotenv()
    args = parse_args(argv)

    detectors = tuple(d.strip() for d in args.detectors.split(",") if d.strip())
    params = SimulationParameters(
        run_id=args.run_id,
        MR=args.mr,
        MT=args.mt,
        modulation=Modulation.from_name(args.modulation).value,
        trials=args.trials,
        snr_db_list=tuple(range(args.snr_start, args.snr_end + 1, args.snr_step)),
        los=args.los,
        chest=ChannelEstimator.from_name(args.chest).value,
        detectors=detectors,
        config=DetectorConfig(kbest=KBestConfig(k=args.kbest_k))
    )
    # the command line cannot supply an SDP solver, so exact SDR is rejected here
    validate_detectors(params.detectors, params.modulation)
    device = select_device(args.device)

    print("Config:")
    print(f"  name={params.sim_name} run_id={params.run_id}")
    print(f"  MR={params.MR} MT={params.MT} modulation={params.modulation}")
    print(f"  trials={params.trials} snr_db={list(params.snr_db_list)}")
    print(f"  los={params.los} chest={params.chest}")
    print(f"  detectors={','.join(params.detectors)}")
    print(f"  device={device}")
    if args.dry_run:
        return None

    results = simulate_error_rates(params, device=device)

    results_dir = create_results_directory(args.results_dir)
    save_results_to_csv(results_dir, results)
    save_simulation_parameters(results_dir, params, results)
    print(f"\nAll results saved to: {results_dir}")
    return results

if __name__ == "__main__":
    main()
