"""Retry storm: a growing client population against a small server pool.

This example ramps the number of clients while every client retries failed
and timed-out requests. It shows how backoff strategy, timeout and queue
bound decide whether the pool degrades gracefully or collapses under its own
retries.

## Architecture

```
   ┌──────────┐  request   ┌─────────┐  deliver   ┌──────────────────────┐
   │ Clients  │───────────►│ Network │───────────►│ Server pool (FIFO,   │
   │ (ramp)   │            │ latency │            │ bounded, 1 worker)   │
   └──────────┘            │ + drops │            └──────────┬───────────┘
        ▲                  └─────────┘                       │
        │          success / failure / quick reject          │
        └────────────────────────────────────────────────────┘
                  (timeouts fire locally at the client)
```

Run with ``--backoff exponential-random`` and compare the "Request count"
chart with the default constant backoff.
"""

from __future__ import annotations

from pathlib import Path

from retrysim import (
    BACKOFFS,
    ClientConfig,
    NetworkConfig,
    Normal,
    ScenarioConfig,
    ServerConfig,
    backoff_from_name,
    configure_from_env,
    run_scenario,
    series_frame,
)
from retrysim.instrumentation.series import CHARTS
from retrysim.scenario import ScenarioResult


def print_summary(result: ScenarioResult) -> None:
    """Print summary statistics."""
    counts = result.simulation.recorder.counts()
    unique = counts["start_request"]
    sent = counts["request_sent"]

    print("\n" + "=" * 60)
    print("RETRY STORM RESULTS")
    print("=" * 60)
    print(result.summary)

    print(f"\nRequest Flow:")
    print(f"  Unique requests:   {unique}")
    print(f"  Attempts sent:     {sent}")
    print(f"  Succeeded:         {counts['request_succeeded']}")
    print(f"  Failed responses:  {counts['request_failed']}")
    print(f"  Timed out:         {counts['request_timedout']}")
    print(f"  Quick rejects:     {counts['queue_full']}")
    print(f"  Network sends:     {result.network.stats_sent} ({result.network.stats_dropped} lost)")

    if unique:
        print(f"\nRetry amplification: {sent / unique:.2f}x")

    print("\n" + "=" * 60)


def visualize_results(result: ScenarioResult, output_dir: Path) -> None:
    """Render the four standard charts to PNG files."""
    import matplotlib.pyplot as plt

    output_dir.mkdir(parents=True, exist_ok=True)

    fig, axes = plt.subplots(len(CHARTS), 1, figsize=(12, 4 * len(CHARTS)))
    for ax, chart in zip(axes, CHARTS):
        for name in chart.left:
            s = result.series[name]
            ax.plot([t / 1000 for t in s.times()], s.values(), linewidth=1, label=s.label)
        ax.set_ylim(bottom=0)
        ax.set_title(chart.caption)
        ax.set_xlabel("Time (s)")
        ax.grid(True, alpha=0.3)

        if chart.right:
            ax2 = ax.twinx()
            for name in chart.right:
                s = result.series[name]
                ax2.plot([t / 1000 for t in s.times()], s.values(), "k--", linewidth=1, label=s.label)
            ax2.set_ylim(bottom=0)
            ax2.legend(loc="upper right")
        ax.legend(loc="upper left", ncol=3)

    plt.tight_layout()
    fig.savefig(output_dir / "retry_storm.png", dpi=150)
    plt.close(fig)

    series_frame(result.series).to_csv(output_dir / "series.csv")
    print(f"\nSaved charts and series to: {output_dir.absolute()}")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Retrying clients vs. a lossy server pool")
    parser.add_argument("--duration", type=float, default=10.0, help="Run length (virtual minutes)")
    parser.add_argument("--servers", type=int, default=5, help="Server pool size")
    parser.add_argument("--clients-start", type=int, default=100, help="Clients at t=0")
    parser.add_argument("--clients-end", type=int, default=1500, help="Clients by the end of the ramp")
    parser.add_argument("--latency", type=float, default=10.0, help="Mean network latency (ms)")
    parser.add_argument("--drop", type=float, default=0.001, help="Network drop probability")
    parser.add_argument("--proc-time", type=float, default=50.0, help="Mean processing time (ms)")
    parser.add_argument("--queue-bound", type=int, default=100, help="Per-server queue bound")
    parser.add_argument("--fail", type=float, default=0.01, help="Server failure probability")
    parser.add_argument("--no-quick-reject", action="store_true", help="Drop arrivals on a full queue")
    parser.add_argument("--backoff", choices=sorted(BACKOFFS), default="constant", help="Backoff strategy")
    parser.add_argument("--timeout", type=float, default=30000.0, help="Client timeout (ms)")
    parser.add_argument("--retries", type=int, default=10, help="Max retries per request")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (-1 for random)")
    parser.add_argument("--output", type=str, default="output/retry_storm", help="Output dir")
    parser.add_argument("--no-viz", action="store_true", help="Skip visualization")
    args = parser.parse_args()

    configure_from_env()

    config = ScenarioConfig(
        network=NetworkConfig(latency=Normal(args.latency, args.latency / 5), drop_probability=args.drop),
        server=ServerConfig(
            proc_time=Normal(args.proc_time, args.proc_time / 5),
            queue_bound=args.queue_bound,
            failure_probability=args.fail,
            quick_reject=not args.no_quick_reject,
        ),
        client=ClientConfig(
            backoff=backoff_from_name(args.backoff),
            timeout_ms=args.timeout,
            max_retries=args.retries,
        ),
        server_count=args.servers,
        initial_clients=args.clients_start,
        final_clients=args.clients_end,
        duration_minutes=args.duration,
        seed=None if args.seed == -1 else args.seed,
    )

    print("Running retry storm simulation...")
    print(f"  Clients: {args.clients_start} -> {args.clients_end} over {args.duration} min")
    print(f"  Servers: {args.servers} x queue {args.queue_bound}, backoff={args.backoff}")

    result = run_scenario(config)
    print_summary(result)

    if not args.no_viz:
        visualize_results(result, Path(args.output))
