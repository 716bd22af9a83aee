"""
Command-line interface for the bead pattern generator.
"""

import os
import sys
import argparse

from .catalog import ColorSystem, get_color_catalog
from .config import Config
from .export import color_summary, export_pattern
from .palette import list_presets
from .pipeline import PatternGenerator
from .recommend import GuidancePolicy, recommend_next_region
from .sampler import MAX_GRID_WIDTH, MIN_GRID_WIDTH, SamplingMode


def create_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser."""
    parser = argparse.ArgumentParser(
        description="Turn images into bead patterns with per-brand color codes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # 80 beads wide, merge close colors, drop the background
  beadkit photo.png out/ --width 80 --merge 40 --remove-background

  # Show codes in another catalog
  beadkit photo.png out/ --system COCO

  # Restrict the palette to a few colors
  beadkit photo.png out/ --colors "#000000,#FFFFFF,#E01E22"

  # Translate one color into every catalog
  beadkit --lookup "#FFDD99"

  # List supported catalogs
  beadkit --list-systems
        """
    )

    parser.add_argument(
        "input",
        nargs="?",
        help="Input image file (PNG/JPG) - required for pattern generation"
    )
    parser.add_argument(
        "output",
        nargs="?",
        help="Output directory for the pattern files - required for pattern generation"
    )
    parser.add_argument(
        "--config", "-c",
        type=str,
        help="YAML configuration file (command-line options override it)"
    )

    # Grid
    parser.add_argument(
        "--width", "-w",
        type=int,
        help=f"Grid width in beads ({MIN_GRID_WIDTH}-{MAX_GRID_WIDTH}, default: 100)"
    )
    parser.add_argument(
        "--height",
        type=int,
        help="Grid height in beads (default: follows the image aspect ratio)"
    )
    parser.add_argument(
        "--mode", "-m",
        choices=[m.value for m in SamplingMode],
        help="Sampling mode (default: dominant)"
    )

    # Palette and processing
    parser.add_argument(
        "--palette", "-p",
        dest="preset",
        type=str,
        help="Palette preset: every color of the named catalog (default: MARD)"
    )
    parser.add_argument(
        "--colors",
        type=str,
        help="Comma-separated hex colors to use instead of a preset"
    )
    parser.add_argument(
        "--merge",
        dest="merge_threshold",
        type=float,
        help="Color merge threshold, RGB distance 0-450 (default: 30, 0 disables)"
    )
    parser.add_argument(
        "--remove-background",
        action="store_true",
        default=None,
        help="Mark the border-connected background color as external"
    )
    parser.add_argument(
        "--system", "-s",
        type=str,
        help="Catalog used for printed color codes (default: MARD)"
    )
    parser.add_argument(
        "--mapping-file",
        type=str,
        help="Catalog mapping CSV replacing the bundled table"
    )
    parser.add_argument(
        "--policy",
        choices=[p.value for p in GuidancePolicy],
        help="Region recommendation policy for --recommend (default: nearest)"
    )
    parser.add_argument(
        "--recommend",
        type=str,
        metavar="COLOR",
        help="After generation, print the first region to place for this color key"
    )

    # Utility commands
    parser.add_argument(
        "--list-systems",
        action="store_true",
        help="List supported color catalogs"
    )
    parser.add_argument(
        "--lookup",
        type=str,
        metavar="HEX",
        help="Print the code of a hex color in every catalog"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    return parser


def validate_arguments(args: argparse.Namespace) -> bool:
    """Validate command-line arguments for pattern generation."""
    if args.list_systems or args.lookup:
        return True

    if not args.input:
        print("Error: Input image file is required for pattern generation")
        return False

    if not args.output:
        print("Error: Output directory is required for pattern generation")
        return False

    if not os.path.exists(args.input):
        print(f"Error: Input file not found: {args.input}")
        return False

    if args.width is not None and args.width <= 0:
        print("Error: Width must be positive")
        return False

    if args.height is not None and args.height <= 0:
        print("Error: Height must be positive")
        return False

    if args.merge_threshold is not None and args.merge_threshold < 0:
        print("Error: Merge threshold must be non-negative")
        return False

    for name in (args.system, args.preset):
        if name is None:
            continue
        try:
            ColorSystem.parse(name)
        except ValueError as e:
            print(f"Error: {e}")
            return False

    return True


def build_config(args: argparse.Namespace) -> Config:
    """Configuration from the optional YAML file plus command-line overrides."""
    colors = None
    if args.colors:
        colors = [value.strip() for value in args.colors.split(',') if value.strip()]

    return Config.from_yaml(
        args.config or "",
        input=args.input,
        output_dir=args.output,
        width=args.width,
        height=args.height,
        mode=args.mode,
        preset=args.preset,
        colors=colors,
        merge_threshold=args.merge_threshold,
        remove_background=args.remove_background,
        system=args.system,
        mapping_file=args.mapping_file,
        policy=args.policy,
    )


def list_systems():
    """List supported catalogs with their entry counts."""
    catalog = get_color_catalog()
    print("\n" + "=" * 60)
    print(f"COLOR SYSTEMS (table version {catalog.version})")
    print("=" * 60)
    for system in ColorSystem:
        print(f"  {system.value:<10} {system.display_name:<8} {len(catalog.hex_values(system))} colors")
    print(f"\nPresets: {', '.join(list_presets())}")
    print("=" * 60)


def show_lookup(hex_value: str):
    """Print the code of one color in every catalog."""
    catalog = get_color_catalog()
    print(f"\n{hex_value}:")
    for system in ColorSystem:
        print(f"  {system.display_name}: {catalog.lookup(hex_value, system)}")


def generate(args: argparse.Namespace) -> bool:
    """Generate a bead pattern and write its files."""
    try:
        config = build_config(args)

        print("\n" + "=" * 60)
        print("BEAD PATTERN GENERATOR")
        print("=" * 60)
        print(f"Input: {config.input}")
        print(f"Output: {config.output_dir}")
        print(f"Width: {config.grid.width} beads ({config.grid.mode})")
        print(f"Palette: {'custom' if config.palette.colors else config.palette.preset}")
        print(f"Merge threshold: {config.processing.merge_threshold}")
        print("-" * 60)

        generator = PatternGenerator(config, verbose=True)
        result = generator.generate(config.input)
        system = generator.display_system

        outputs = export_pattern(result.grid, config.output_dir,
                                 system=system, catalog=generator.catalog)

        print("\n" + "=" * 60)
        print("[OK] PATTERN GENERATION COMPLETE")
        print("=" * 60)
        cols, rows = result.metadata['grid_size']
        print(f"Grid size: {cols} x {rows} ({result.grid.total_cells:,} cells)")
        print(f"Beads: {result.metadata['bead_count']:,}")
        if result.background_key:
            print(f"Background: {result.background_key}")

        print(f"\nColors ({system.display_name}):")
        for item in color_summary(result.grid, system, generator.catalog):
            print(f"  {item['code']:<8} {item['color']}  x{item['count']}")

        if args.recommend:
            recommendation = recommend_next_region(
                result.grid, args.recommend, set(), policy=config.guidance.policy
            )
            if recommendation is None:
                print(f"\n[WARN] No region left for {args.recommend}")
            else:
                row, col = recommendation.center
                print(f"\nStart with {args.recommend}: {len(recommendation.region)} cells "
                      f"around row {row:.1f}, col {col:.1f}")

        print(f"\nGenerated Files:")
        for path in outputs.values():
            print(f"  [OK] {path}")

        return True

    except Exception as e:
        print(f"\n[X] Error during pattern generation: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return False


def main(argv=None):
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.list_systems:
        list_systems()
        return

    if args.lookup:
        show_lookup(args.lookup)
        return

    if not validate_arguments(args):
        sys.exit(1)

    success = generate(args)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
