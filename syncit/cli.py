#!/usr/bin/env python3
"""
syncit  —  copy, mirror and sync directories, locally or over SFTP
==================================================================

Subcommands:
  init        Create a .syncit profile file in the current directory.
  copy        Copy directory 'src' to directory 'dst'.
  mirror      Mirror 'src' to 'dst' (only newer / changed files are copied).
  sync        Two-way sync of 'src' and 'dst' (newer side wins, no deletes).
  sftpmirror  Mirror a local directory to an SFTP server, or back with -r.
  sftpsync    Two-way sync between a local directory and an SFTP server.

Run 'syncit <subcommand> --help' for more details.
"""
import sys
import argparse
from pathlib import Path

from .core.errors import SyncitError


# ── init ─────────────────────────────────────────────────────────────────────

def cmd_init(args):
    """Create a .syncit profile file in the current directory."""
    import yaml
    from . import config as _cfg

    target = Path.cwd() / _cfg.CONFIG_FILE_NAME

    if target.exists() and not args.force:
        print(f"error: {_cfg.CONFIG_FILE_NAME} already exists in {Path.cwd()}", file=sys.stderr)
        print("Use --force to overwrite.", file=sys.stderr)
        sys.exit(1)

    g_defaults = _cfg.load_global_config().get("defaults", {})

    local_root = str(Path(args.local or Path.cwd()).expanduser()).replace("\\", "/")
    server = args.server or g_defaults.get("server")
    if not server:
        print("error: --server is required (no default in the global config).", file=sys.stderr)
        sys.exit(1)

    profile = {
        "name": args.profile or "default",
        "server": server,
        "port": args.port or int(g_defaults.get("port", _cfg.SSH_PORT)),
        "user": args.user or g_defaults.get("user", _cfg.SSH_USER),
        "local_root": local_root,
        "remote_root": args.remote or Path(local_root).name,
    }
    if args.key:
        profile["ssh_key"] = args.key

    content = (
        "# .syncit: syncit project configuration\n"
        "# profiles: list of SFTP profiles for this project.\n"
        + yaml.safe_dump({"profiles": [profile]}, sort_keys=False)
    )

    if args.dry_run:
        print(f"[dry-run] Would write {target}:")
        print(content)
        return

    target.write_text(content, encoding="utf-8")
    print(f"Created {target}")
    if args.verbose:
        print(content)


# ── local commands ───────────────────────────────────────────────────────────

def _src_dst(args, parser):
    if not args.src or not args.dst:
        parser.error("missing required arguments 'src' and 'dst'")
    return args.src, args.dst


def cmd_copy(args, parser):
    from .core import sync_engine

    src, dst = _src_dst(args, parser)
    sync_engine.copy(src, dst, dry_run=args.dry_run, clean=not args.dirty,
                     verbose=args.verbose)


def cmd_mirror(args, parser):
    from .core import sync_engine

    src, dst = _src_dst(args, parser)
    sync_engine.mirror(src, dst, dry_run=args.dry_run, clean=not args.dirty,
                       skip_hidden=args.skip_hidden, deep_compare=args.deep_compare,
                       force_write=args.force_write, verbose=args.verbose)


def cmd_sync(args, parser):
    from .core import sync_engine

    src, dst = _src_dst(args, parser)
    sync_engine.sync(src, dst, dry_run=args.dry_run, skip_hidden=args.skip_hidden,
                     verbose=args.verbose)


# ── sftp commands ────────────────────────────────────────────────────────────

def _remote_setup(args, parser):
    """
    Resolve (local, remote, credentials) from positional arguments, falling
    back to the nearest .syncit profile for anything not given.
    """
    from . import config as _cfg

    profile: dict = {}
    cfg_path = _cfg.find_config()
    if cfg_path is not None:
        if args.verbose:
            print(f"[config] Using {cfg_path}")
        profile = _cfg.get_profile(_cfg.load_config_file(cfg_path), args.profile)

    local = args.local or profile.get("local_root")
    remote = args.remote or profile.get("remote_root")
    if not local or not remote:
        parser.error("missing required argument 'local' or 'remote' (and no .syncit profile)")

    try:
        creds = _cfg.credentials_from_profile(profile, host=args.host, user=args.user,
                                              port=args.port, key_filename=args.key)
    except ValueError as exc:
        parser.error(str(exc))
    return str(local), str(remote), creds


def cmd_sftpmirror(args, parser):
    from .core import sync_engine

    local, remote, creds = _remote_setup(args, parser)
    sync_engine.mirror_remote(local, remote, creds, reverse=args.reverse,
                              dry_run=args.dry_run, skip_hidden=args.skip_hidden,
                              clean=not args.dirty, verbose=args.verbose)


def cmd_sftpsync(args, parser):
    from .core import sync_engine

    local, remote, creds = _remote_setup(args, parser)
    sync_engine.sync_remote(local, remote, creds, dry_run=args.dry_run,
                            skip_hidden=args.skip_hidden, verbose=args.verbose)


# ── main ──────────────────────────────────────────────────────────────────────

def _common(p, clean=True, hidden=True):
    p.add_argument("-n", "--dry-run", action="store_true",
                   help="Show what would be done without changing anything")
    if clean:
        p.add_argument("-x", "--dirty", action="store_true",
                       help="Do not remove anything from dst that is not found in src")
    if hidden:
        p.add_argument("-s", "--skip-hidden", action="store_true",
                       help="Skip hidden files and directories")
    p.add_argument("-v", "--verbose", action="store_true",
                   help="Show every entry, not just actions")


def _remote_args(p):
    p.add_argument("local", nargs="?", help="Local directory")
    p.add_argument("remote", nargs="?", help="Remote directory")
    p.add_argument("host", nargs="?", help="SFTP server host")
    p.add_argument("user", nargs="?", help="SSH user name")
    p.add_argument("-p", "--port", type=int, metavar="N",
                   help="SSH port (default: 22)")
    p.add_argument("--key", metavar="PATH",
                   help="Private key file (default: ssh-agent / ~/.ssh/id_*)")
    p.add_argument("--profile", metavar="NAME", default="default",
                   help="Profile from .syncit to use (default: default)")


def build_parser():
    parser = argparse.ArgumentParser(
        prog="syncit",
        description="Copy, mirror and sync directories, locally or over SFTP",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # ── init ──────────────────────────────────────────────────────────────────
    init_p = subparsers.add_parser(
        "init",
        help="Create a .syncit profile file in the current directory",
        description="Create a .syncit YAML profile for SFTP commands.",
    )
    init_p.add_argument("--local", metavar="PATH",
                        help="Local root directory (default: current directory)")
    init_p.add_argument("--remote", metavar="PATH",
                        help="Remote root path")
    init_p.add_argument("--server", metavar="HOST",
                        help="Remote server hostname or IP")
    init_p.add_argument("--user", metavar="NAME",
                        help="SSH username (default: root)")
    init_p.add_argument("--port", type=int, metavar="N",
                        help="SSH port (default: 22)")
    init_p.add_argument("--key", metavar="PATH",
                        help="Private key file")
    init_p.add_argument("--profile", metavar="NAME", default="default",
                        help="Profile name to create (default: default)")
    init_p.add_argument("--force", action="store_true",
                        help="Overwrite existing .syncit")
    init_p.add_argument("-n", "--dry-run", action="store_true",
                        help="Preview without writing files")
    init_p.add_argument("-v", "--verbose", action="store_true",
                        help="Show extra output")

    # ── copy ──────────────────────────────────────────────────────────────────
    copy_p = subparsers.add_parser(
        "copy", aliases=["cp"],
        help="Copy directory 'src' to directory 'dst'",
        description="Copy the content of src to dst. Unless --dirty is given, "
                    "dst is emptied first.",
    )
    copy_p.add_argument("src", nargs="?")
    copy_p.add_argument("dst", nargs="?")
    _common(copy_p, hidden=False)

    # ── mirror ────────────────────────────────────────────────────────────────
    mirror_p = subparsers.add_parser(
        "mirror", aliases=["mi"],
        help="Mirror directory 'src' to directory 'dst'",
        description="Files are only copied if the source file is newer or differs "
                    "in size. By default anything in dst that is not in src is deleted.",
    )
    mirror_p.add_argument("src", nargs="?")
    mirror_p.add_argument("dst", nargs="?")
    _common(mirror_p)
    mirror_p.add_argument("--deep-compare", action="store_true",
                          help="Compare byte-by-byte before overwriting a changed file")
    mirror_p.add_argument("--force-write", action="store_true",
                          help="Overwrite every existing file in dst")

    # ── sync ──────────────────────────────────────────────────────────────────
    sync_p = subparsers.add_parser(
        "sync", aliases=["sy"],
        help="Synchronize directory 'src' with directory 'dst'",
        description="Files are copied if one side is newer or missing. "
                    "Nothing is deleted.",
    )
    sync_p.add_argument("src", nargs="?")
    sync_p.add_argument("dst", nargs="?")
    _common(sync_p, clean=False)

    # ── sftpmirror ────────────────────────────────────────────────────────────
    smir_p = subparsers.add_parser(
        "sftpmirror", aliases=["smir"],
        help="Mirror directories via SFTP",
        description="Direction is local --> remote, or remote --> local with --reverse.",
    )
    _remote_args(smir_p)
    smir_p.add_argument("-r", "--reverse", action="store_true",
                        help="Mirror remote to local instead of local to remote")
    _common(smir_p)

    # ── sftpsync ──────────────────────────────────────────────────────────────
    ssy_p = subparsers.add_parser(
        "sftpsync", aliases=["ssy"],
        help="Sync directories via SFTP",
        description="Two-way sync between a local directory and an SFTP server.",
    )
    _remote_args(ssy_p)
    _common(ssy_p, clean=False)

    parsers = {
        "copy": (cmd_copy, copy_p), "cp": (cmd_copy, copy_p),
        "mirror": (cmd_mirror, mirror_p), "mi": (cmd_mirror, mirror_p),
        "sync": (cmd_sync, sync_p), "sy": (cmd_sync, sync_p),
        "sftpmirror": (cmd_sftpmirror, smir_p), "smir": (cmd_sftpmirror, smir_p),
        "sftpsync": (cmd_sftpsync, ssy_p), "ssy": (cmd_sftpsync, ssy_p),
    }
    return parser, parsers


def main(argv=None):
    """CLI entry point for syncit"""
    parser, parsers = build_parser()
    args = parser.parse_args(argv)

    if args.command == "init":
        cmd_init(args)
        return
    if args.command not in parsers:
        parser.print_help()
        sys.exit(1)

    handler, sub_parser = parsers[args.command]
    try:
        handler(args, sub_parser)
    except SyncitError as exc:
        print(f"error: {exc}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print()
        print("Interrupted by user.", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    main()
