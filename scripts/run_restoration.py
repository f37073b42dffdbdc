"""
Restoration Demo on a synthetic track.
Builds a measured waveform (long wave + mid wave + short wave + noise), restores it,
generates the initial plan line and plots waveform, plan line, movement and versines.
"""

import os

import matplotlib.pyplot as plt
import numpy as np

from restoration import FilterParameters, MeasurementSeries, RestorationPipeline
from restoration.config import settings
from restoration.log import configure_logging
from restoration.metrics import PeakMetric, RestrictionMetric, SigmaMetric, WorkSectionMetric


def synthetic_track(points=4000, interval=0.25, seed=0):
    """8·sin(2πd/50) + 5·sin(2πd/10) + 2·sin(2πd/2) + noise (mm)"""
    rng = np.random.default_rng(seed)
    d = np.arange(points) * interval
    values = (
        8 * np.sin(2 * np.pi * d / 50)
        + 5 * np.sin(2 * np.pi * d / 10)
        + 2 * np.sin(2 * np.pi * d / 2)
        + rng.normal(0, 0.5, points)
    )
    return MeasurementSeries(d, values)


def main():
    configure_logging(level="DEBUG")

    # 1. Input waveform
    series = synthetic_track()
    print(f"[*] Synthetic track: {len(series)} points, {series.distance[-1]:.1f} m")

    # 2. Pipeline setup
    params = FilterParameters.from_settings(min_wavelength=6.0, max_wavelength=100.0, filter_order=801)
    pipeline = RestorationPipeline(params=params, plan_window=200)
    pipeline.add_metric(SigmaMetric(exclude_edges=True))
    pipeline.add_metric(PeakMetric())
    pipeline.add_metric(RestrictionMetric())
    pipeline.add_metric(WorkSectionMetric(threshold=2.0))

    result = pipeline.run(series)

    print(f"[*] Sigma original : {result.original_statistics.sigma:.3f} mm")
    print(f"[*] Sigma restored : {result.restored_statistics.sigma:.3f} mm")
    print(f"[*] Improvement    : {result.improvement_rate:.1f} %")
    for key, value in result.metrics.items():
        print(f"    {key}: {value}")

    # 3. Plot
    fig, axs = plt.subplots(3, 1, figsize=(12, 10), sharex=True)
    d = result.restored_waveform.distance

    axs[0].plot(d, result.original.values, label="Measured", color="lightgray")
    axs[0].plot(d, result.restored_waveform.values, label="Restored", color="red", linewidth=1.5)
    axs[0].plot(d, result.plan_line.values, label="Plan line", color="blue", linestyle="--")
    axs[0].set_ylabel("Irregularity [mm]")
    axs[0].legend(loc="upper right")
    axs[0].grid(True, alpha=0.3)

    axs[1].plot(d, result.movement.movement, color="green")
    axs[1].axhline(settings.STANDARD_LIMIT, color="orange", linestyle=":")
    axs[1].axhline(-settings.STANDARD_LIMIT, color="orange", linestyle=":")
    axs[1].set_ylabel("Movement [mm]")
    axs[1].grid(True, alpha=0.3)

    for label, versine in result.versine_data.items():
        axs[2].plot(d, versine.values, label=f"Versine {label}")
    axs[2].set_ylabel("Versine [mm]")
    axs[2].set_xlabel("Distance [m]")
    axs[2].legend(loc="upper right")
    axs[2].grid(True, alpha=0.3)

    plt.tight_layout()
    os.makedirs(settings.DATA_ROOT, exist_ok=True)
    out_path = os.path.join(settings.DATA_ROOT, "restoration_demo.png")
    plt.savefig(out_path, dpi=120)
    print(f"[*] Plot saved: {out_path}")


if __name__ == "__main__":
    main()
