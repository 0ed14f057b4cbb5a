from pathlib import Path
from typing import Annotated

import numpy as np
import typer
from matplotlib import pyplot as plt

from rupture_forecast import mfd, moment


def plot_mfd_branches(
    output_ffp: Annotated[
        Path, typer.Argument(help="Output plot path.", writable=True, dir_okay=False)
    ],
    moment_rate: Annotated[
        float, typer.Option(help="Fault moment rate (Nm/yr).", min=0)
    ] = 1e17,
    gr_m_min: Annotated[float, typer.Option(help="GR minimum magnitude.")] = 6.55,
    gr_m_max: Annotated[float, typer.Option(help="GR maximum magnitude.")] = 7.5,
    b_value: Annotated[float, typer.Option(help="GR b-value.")] = 0.87,
    d_mag: Annotated[float, typer.Option(help="Magnitude bin width.")] = 0.1,
    ch_magnitude: Annotated[
        float, typer.Option(help="Characteristic magnitude.")
    ] = 7.5,
    gr_weight: Annotated[
        float, typer.Option(help="Weight of the GR branches.", min=0, max=1)
    ] = 0.5,
    cumulative: Annotated[
        bool, typer.Option(help="Plot cumulative rather than incremental rates.")
    ] = False,
    dpi: Annotated[
        float, typer.Option(help="Output plot DPI (higher is better).")
    ] = 300,
) -> None:
    """Plot the moment balanced GR and CH branches of a fault."""
    ch_weight = 1 - gr_weight
    branches = []
    if gr_weight > 0:
        branches += mfd.gutenberg_richter_branches(
            gr_m_min, gr_m_max, d_mag, b_value, moment_rate, weight=gr_weight
        )
    if ch_weight > 0:
        branches += mfd.characteristic_branches(
            ch_magnitude, moment_rate, weight=ch_weight
        )

    fig, ax = plt.subplots()
    for branch in branches:
        rates = branch.unweighted_rates
        if cumulative:
            rates = np.cumsum(rates[::-1])[::-1]
        linestyle = "-" if branch.key.mfd_type == mfd.MfdType.GR else "--"
        ax.plot(
            branch.magnitudes,
            rates,
            linestyle=linestyle,
            marker=".",
            label=f"{branch.label} (w={branch.weight:.2f})",
        )

    total_moment_rate = sum(branch.moment_rate for branch in branches)
    ax.set_yscale("log")
    ax.set_xlabel("Mw")
    ax.set_ylabel("Cumulative rate (1/yr)" if cumulative else "Rate (1/yr)")
    ax.set_title(
        f"MFD branches, Mo rate {moment_rate:.3e} "
        f"(M{moment.moment_to_magnitude(total_moment_rate):.2f}/yr)"
    )
    ax.legend(fontsize="small")
    fig.savefig(output_ffp, dpi=dpi)
    plt.close(fig)


def main():
    typer.run(plot_mfd_branches)


if __name__ == "__main__":
    main()
