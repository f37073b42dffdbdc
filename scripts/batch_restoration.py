"""
Batch Restoration Script.
Restores every ``distance,value`` CSV under DATA_ROOT and writes one summary row per file.
"""

import glob
import os

import pandas as pd
from loguru import logger
from tqdm import tqdm

from restoration import MeasurementSeries, RestorationError, RestorationPipeline
from restoration.config import settings
from restoration.log import configure_logging
from restoration.metrics import PeakMetric, RestrictionMetric, SigmaMetric, WorkSectionMetric

SUMMARY_FILE = "restoration_summary.csv"


def load_series(csv_path):
    """CSV with 'distance' (m) and 'value' (mm) columns -> MeasurementSeries"""
    df = pd.read_csv(csv_path)
    missing = {"distance", "value"} - set(df.columns)
    if missing:
        raise ValueError(f"missing columns: {sorted(missing)}")
    df = df.dropna(subset=["distance", "value"]).sort_values("distance")
    df = df.drop_duplicates(subset="distance", keep="first")
    return MeasurementSeries(df["distance"].to_numpy(), df["value"].to_numpy())


def save_waveforms(result, out_path):
    pd.DataFrame(
        {
            "distance": result.restored_waveform.distance,
            "original": result.original.values,
            "restored": result.restored_waveform.values,
            "plan_line": result.plan_line.values,
            "movement": result.movement.movement,
            "low_confidence": result.restored_waveform.confidence_mask,
        }
    ).to_csv(out_path, index=False)


def main():
    configure_logging()

    input_dir = os.path.join(settings.DATA_ROOT, "measurements")
    output_dir = os.path.join(settings.DATA_ROOT, "restored")
    files = sorted(glob.glob(os.path.join(input_dir, "*.csv")))
    if not files:
        print(f"[!] No CSV files found in {input_dir}")
        return
    os.makedirs(output_dir, exist_ok=True)

    print(f"[*] Found {len(files)} files. Starting batch restoration...")

    # Pipeline setup
    pipeline = RestorationPipeline(chunk_size=settings.CHUNK_SIZE)
    pipeline.add_metric(SigmaMetric(exclude_edges=True))
    pipeline.add_metric(PeakMetric())
    pipeline.add_metric(RestrictionMetric())
    pipeline.add_metric(WorkSectionMetric())

    rows = []
    for path in tqdm(files):
        name = os.path.splitext(os.path.basename(path))[0]
        try:
            series = load_series(path)
            result = pipeline.run(series)
        except (RestorationError, ValueError) as e:
            logger.error(f"{name}: {e}")
            continue

        save_waveforms(result, os.path.join(output_dir, f"{name}_restored.csv"))
        row = {
            "file": name,
            "points": len(result.original),
            "sigma_original_mm": round(result.original_statistics.sigma, 3),
            "sigma_restored_mm": round(result.restored_statistics.sigma, 3),
            "improvement_pct": round(result.improvement_rate, 2),
        }
        row.update(result.metrics)
        rows.append(row)

    if rows:
        summary_path = os.path.join(output_dir, SUMMARY_FILE)
        pd.DataFrame(rows).to_csv(summary_path, index=False)
        print(f"[*] Saved {len(rows)} results to {summary_path}")


if __name__ == "__main__":
    main()
