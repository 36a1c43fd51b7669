#  squashslayer main CLI: listing, pseudo file and fragment modes, plus logging
#  Every mode opens the image once and always removes the staging tree.
import sys

from squashslayer.errors import SquashfsError
from squashslayer.modules.keepers.image_store import SquashfsImage
from squashslayer.modules.keepers.squashslayer import Tee, display_listing, dump_entries_json
from squashslayer.modules.cli import parse_args


def main(argv=None):
    args = parse_args(argv)

    # --- API server mode ---
    if args.api:
        import uvicorn
        print("[*] Starting API server on http://127.0.0.1:8000/docs")
        uvicorn.run("squashslayer.modules.api.api:app", host="127.0.0.1", port=8000)
        return 0

    # set up logging/tee if requested
    if args.log_file:
        log_f = open(args.log_file, "w", encoding="utf-8")
        sys.stdout = Tee(sys.stdout, log_f)
        sys.stderr = Tee(sys.stderr, log_f)

    try:
        image = SquashfsImage.open(args.image_path, workdir=args.workdir, verbose=args.verbose)
    except SquashfsError as e:
        print(f"[!] Error: {e}")
        return 1

    try:
        # --- listing modes ---
        if args.files:
            for path in image.files():
                print(path)

        if args.listing:
            display_listing(image, verbose=args.verbose)

        if args.json:
            print(dump_entries_json(image))

        if args.pseudofile:
            print(image.pseudofile())

        # --- fragment mode ---
        if args.fragment:
            if args.output_path:
                print(f"[*] Building fragment of {len(args.fragment)} path(s) into {args.output_path}")
                output = image.build_fragment(
                    args.fragment,
                    args.output_path,
                    with_parents=args.with_parents,
                    verbose=args.verbose,
                )
                print(f"[+] Saved fragment to {output}")
            else:
                print(image.pseudofile_fragment(args.fragment, with_parents=args.with_parents))
    except SquashfsError as e:
        print(f"[!] Error: {e}")
        return 1
    finally:
        # Always remove the extracted tree when done
        image.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
