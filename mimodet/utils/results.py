"""
Result management utilities.
"""

import csv
import datetime
from pathlib import Path

def create_results_directory(base_dir="results"):
    """
    Create a timestamped results directory.

    Returns:
        Path: Path to the created directory
    """
    timestamp = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
    results_dir = Path(base_dir) / timestamp
    results_dir.mkdir(parents=True, exist_ok=True)
    print(f"Created results directory: {results_dir}")
    return results_dir

def save_results_to_csv(results_dir, results):
    """
    Save error rates to one CSV file per metric (rows: SNR, columns: detectors).

    Args:
        results_dir: Directory to save results
        results: SimulationResults

    Returns:
        list: Paths of the written files
    """
    results_dir = Path(results_dir)
    headers = ["SNR (dB)"] + list(results.detectors)
    written = []

    for metric in ("VER", "SER", "BER"):
        rates = getattr(results, metric)
        csv_file = results_dir / f"{metric.lower()}_vs_snr.csv"
        with open(csv_file, 'w', newline='') as f:
            writer = csv.writer(f)
            writer.writerow(headers)
            for k, snr in enumerate(results.snr_db_list):
                writer.writerow([snr] + [rates[d, k] for d in range(len(results.detectors))])
        print(f"Saved {metric} vs SNR data to {csv_file}")
        written.append(csv_file)

    return written

def save_simulation_parameters(results_dir, params, results=None):
    """Write the run configuration as plain text"""
    path = Path(results_dir) / "simulation_parameters.txt"
    with open(path, 'w') as f:
        f.write("Simulation Parameters:\n")
        f.write(f"Name: {params.sim_name}\n")
        f.write(f"Run ID: {params.run_id}\n")
        f.write(f"Antennas (MR x MT): {params.MR} x {params.MT}\n")
        f.write(f"Modulation: {params.modulation}\n")
        f.write(f"Number of trials: {params.trials}\n")
        f.write(f"SNR range: {min(params.snr_db_list)} to {max(params.snr_db_list)} dB\n")
        f.write(f"Line-of-sight channel: {params.los}\n")
        f.write(f"Channel estimator: {params.chest}\n")
        f.write(f"Detectors: {', '.join(params.detectors)}\n")
        f.write(f"Detector config: {params.config}\n")
        if results is not None:
            f.write(f"Elapsed time: {results.time_elapsed:.2f}s\n")
    return path
