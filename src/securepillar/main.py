import argparse
import sys
import textwrap
from typing import Optional

import securepillar
import securepillar.config
import securepillar.manage
from securepillar import ReportingException, actions
from securepillar._output import TerminalBackend, output
from securepillar.files import STDIO
from securepillar.pki import Pki

EXAMPLES = """\
CAVEAT: YAML files with include statements are not handled, they are skipped.

examples:
  # create a new sls file
  securepillar -k "Salt Master" create -n secret_name1 -s secret_value1 \\
      -n secret_name2 -s secret_value2 -o new.sls

  # add to or update a value in an existing file
  securepillar -k "Salt Master" update -n secret_name -s value -f new.sls

  # encrypt all plain text values in a file, in place
  securepillar -k "Salt Master" encrypt all -f us1.sls --update

  # encrypt all plain text values under the element 'secret_stuff'
  securepillar -k "Salt Master" -e secret_stuff encrypt all -f us1.sls -u

  # encrypt all values in all sls files below a directory
  securepillar -k "Salt Master" encrypt recurse -D /path/to/pillar

  # decrypt a specific value (requires the private key)
  securepillar decrypt path -p "some:yaml:path" -f new.sls

  # re-encrypt all files with a new key (requires the old private key)
  securepillar -k "New Salt Master Key" rotate -D /path/to/pillar

  # show the PGP key IDs used in a file, a directory or at a path
  securepillar keys all -f us1.sls
  securepillar keys recurse -D /path/to/pillar
  securepillar keys path -p "some:yaml:path" -f new.sls
"""


def add_file_arguments(p, outfile=True, update=False):
    p.add_argument(
        "-f",
        "--file",
        default=STDIO,
        help="Input file (`-` for stdin).",
    )
    if outfile:
        p.add_argument(
            "-o",
            "--outfile",
            default=STDIO,
            help="Output file (`-` for stdout).",
        )
    if update:
        p.add_argument(
            "-u",
            "--update",
            action="store_true",
            help="Update the input file in place.",
        )


def add_dir_arguments(p, required=True):
    p.add_argument(
        "-D",
        "--dir",
        required=required,
        help="Recurse over all sls files in the given directory.",
    )
    p.add_argument(
        "-j",
        "--jobs",
        type=int,
        default=1,
        help="Number of files to process in parallel.",
    )
    p.add_argument(
        "--extension",
        default=".sls",
        help="Only process files with this extension.",
    )


def add_secret_arguments(p):
    p.add_argument(
        "-n",
        "--name",
        dest="names",
        action="append",
        default=[],
        metavar="NAME",
        help="Secret name or path (repeatable).",
    )
    p.add_argument(
        "-s",
        "--value",
        dest="values",
        action="append",
        default=[],
        metavar="VALUE",
        help="Secret value (repeatable, one per name).",
    )


def add_action_parser(subparsers, action, name, help, path_help):
    parser = subparsers.add_parser(name, help=help)
    parser.set_defaults(func=parser.print_usage)
    sp = parser.add_subparsers()

    p = sp.add_parser("all", help="Process all values in a file.")
    add_file_arguments(
        p,
        outfile=action != actions.VALIDATE,
        update=action != actions.VALIDATE,
    )
    p.set_defaults(func=securepillar.manage.all_values, action=action)

    p = sp.add_parser("recurse", help="Process all files in a directory.")
    add_dir_arguments(p)
    p.set_defaults(func=securepillar.manage.recurse, action=action)

    p = sp.add_parser("path", help="Process the value at a single path.")
    add_file_arguments(p, outfile=action != actions.VALIDATE)
    if action != actions.VALIDATE:
        p.set_defaults(outfile=None)
    p.add_argument("-p", "--path", required=True, help=path_help)
    p.set_defaults(func=securepillar.manage.path, action=action)


def main(args: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(
        description=(
            "securepillar v{}: create and update encrypted content "
            "or decrypt encrypted content in Salt pillar files."
        ).format(securepillar.__version__),
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.set_defaults(func=parser.print_usage)

    parser.add_argument(
        "-d", "--debug", action="store_true", help="Enable debug mode."
    )
    parser.add_argument(
        "--version", action="version", version=securepillar.__version__
    )
    parser.add_argument(
        "--profile", help="Profile to use from the config file."
    )
    parser.add_argument(
        "-k",
        "--pgp-key",
        help="PGP key name, email, or ID to use for encryption.",
    )
    parser.add_argument(
        "--gnupg-home", help="GnuPG home directory (default: $GNUPGHOME)."
    )
    parser.add_argument("--pubring", help="Additional PGP public keyring.")
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds to wait for a single gpg call.",
    )
    parser.add_argument(
        "-e",
        "--element",
        help="Name of the top level element under which encrypted "
        "key/value pairs are kept.",
    )
    parser.add_argument(
        "--config", default=None, help="Alternative config file."
    )

    subparsers = parser.add_subparsers()

    p = subparsers.add_parser("create", help="Create a new sls file.")
    add_secret_arguments(p)
    p.add_argument(
        "-o",
        "--outfile",
        default=STDIO,
        help="Output file (`-` for stdout).",
    )
    p.set_defaults(func=securepillar.manage.create)

    p = subparsers.add_parser(
        "update", help="Update the value of the given key in the given file."
    )
    add_secret_arguments(p)
    p.add_argument("-f", "--file", required=True, help="File to update.")
    p.set_defaults(func=securepillar.manage.update)

    add_action_parser(
        subparsers,
        actions.ENCRYPT,
        "encrypt",
        "Perform encryption operations.",
        "YAML path to encrypt.",
    )
    add_action_parser(
        subparsers,
        actions.DECRYPT,
        "decrypt",
        "Perform decryption operations.",
        "YAML path to decrypt.",
    )
    add_action_parser(
        subparsers,
        actions.VALIDATE,
        "keys",
        "Show the PGP key IDs used.",
        "YAML path to examine.",
    )

    p = subparsers.add_parser(
        "rotate",
        help=textwrap.dedent(
            """
            Decrypt existing files and re-encrypt them with the current
            key."""
        ),
    )
    p.add_argument("-f", "--file", help="Input file.")
    p.add_argument(
        "-o",
        "--outfile",
        default=STDIO,
        help="Output file when rotating a single file.",
    )
    add_dir_arguments(p, required=False)
    p.set_defaults(func=securepillar.manage.rotate)

    args = parser.parse_args(args)

    # Consume global arguments
    output.enable_debug = args.debug

    # Pass over to function
    if args.func.__name__ == "print_usage":
        args.func()
        return 1

    if len(getattr(args, "names", [])) != len(getattr(args, "values", [])):
        parser.error("each --name needs exactly one --value")
    if args.func == securepillar.manage.rotate and not (args.file or args.dir):
        parser.error("rotate needs either --file or --dir")

    output.backend = TerminalBackend()

    func_args = dict(args._get_kwargs())
    for key in [
        "func",
        "debug",
        "profile",
        "pgp_key",
        "gnupg_home",
        "pubring",
        "timeout",
        "element",
        "config",
    ]:
        del func_args[key]

    try:
        profiles = securepillar.config.read_config(args.config)
        profile = None
        if not args.pgp_key:
            profile = securepillar.config.select_profile(
                profiles, args.profile
            )
        settings = securepillar.config.pki_settings(
            profile,
            key_name=args.pgp_key,
            gnupg_home=args.gnupg_home,
            pub_ring=args.pubring,
            timeout=args.timeout,
        )
        pki = Pki(**settings)
        return args.func(pki=pki, element=args.element, **func_args)
    except ReportingException as e:
        e.report()
        return 1
    except OSError as e:
        output.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
