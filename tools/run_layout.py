"""CLI tool to lay out a technology radar.

Usage:
    python -m tools.run_layout --input data/sample_radar.csv --config configs/default.yaml
"""
import argparse
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tech_radar.pipeline.build import run_pipeline


def main():
    parser = argparse.ArgumentParser(description='Lay out a technology radar')
    parser.add_argument('--input', type=str, required=True,
                        help='Row file (.csv, .json, .yaml)')
    parser.add_argument('--config', type=str, default=None,
                        help='Path to layout config YAML')
    parser.add_argument('--seed', type=int, default=None,
                        help='Override the random seed')
    parser.add_argument('--run-id', type=str, default=None,
                        help='Output sub-directory name')
    args = parser.parse_args()

    override = {}
    if args.seed is not None:
        override['seed'] = args.seed
    if args.run_id:
        override['output'] = {'run_id': args.run_id}

    results = run_pipeline(input_path=args.input, config_path=args.config,
                           config_override=override or None)

    print("\n=== Layout Summary ===")
    print(f"Output: {results['output_dir']}")
    print(f"Total time: {results.get('total_time_s', 0):.2f}s")

    metrics = results.get('metrics', {})
    for key, val in metrics.items():
        if isinstance(val, (int, float)):
            print(f"  {key}: {val:.3f}" if isinstance(val, float) else f"  {key}: {val}")


if __name__ == '__main__':
    main()
