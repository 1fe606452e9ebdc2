#!/usr/bin/env python3
"""
Name: teerr
Description: copy standard input to standard output and standard error
License:

Reads standard input in fixed-size chunks and writes every chunk to
standard output and then to a second stream. The second stream is standard
error unless a file descriptor number is given on the command line, in which
case the already-open descriptor is written to instead.

teerr is equivalent to the shell construct: tee >(cat >&2)
"""

import sys
import os
import argparse

__version__ = "1.0"

BUFFER_SIZE = 8192

EXAMPLES = """\
examples:
  value=$(command | teerr)     capture and echo to stderr
  generate | teerr | consume   observe pipeline flow
  command | teerr 3 3>log      write to fd 3 instead of stderr

teerr is equivalent to: tee >(cat >&2)
"""

# Bare words accepted in place of the corresponding flags.
ALIASES = {'help': '--help', 'version': '--version'}


def parse_fd(text):
    """
    Parses a non-negative decimal descriptor number.

    Returns None if the string is empty or contains anything but the
    ASCII digits 0-9, so '-1', '+3', ' 3' and '1.5' are all rejected.
    """
    if not text:
        return None
    n = 0
    for char in text:
        if not '0' <= char <= '9':
            return None
        n = n * 10 + (ord(char) - ord('0'))
    return n


def resolve_secondary(arg=None):
    """
    Returns the binary stream the second copy is written to.

    With no argument this is standard error. Otherwise the argument names a
    descriptor the process inherited (e.g. from '3>file' in the shell). The
    descriptor is borrowed: it is never opened, created or closed here.

    Raises ValueError for an argument that is not a descriptor number and
    OSError for a number that is not an open descriptor.
    """
    if arg is None:
        return sys.stderr.buffer

    fd = parse_fd(arg)
    if fd is None:
        raise ValueError(f"invalid file descriptor: '{arg}'")

    # Fails with EBADF when nothing is open at that number.
    os.fstat(fd)

    # 1 and 2 reuse the buffered writers of the standard streams.
    if fd == 1:
        return sys.stdout.buffer
    if fd == 2:
        return sys.stderr.buffer
    return os.fdopen(fd, 'wb', closefd=False)


def relay(source, primary, secondary):
    """
    Copies source to primary and secondary until end of input.

    Each chunk is written and flushed to primary before it is written to
    secondary, and both happen before the next read. Returns the exit
    status: 0 at a clean end of input, 1 if reading or writing failed.

    A failing secondary is dropped and the rest of the input still goes to
    primary; the failure is reflected only in the returned status.
    """
    buf = bytearray(BUFFER_SIZE)
    view = memoryview(buf)
    # readinto1 returns after a single read instead of filling the buffer.
    read = getattr(source, 'readinto1', None) or source.readinto
    status = 0

    while True:
        try:
            n = read(buf)
        except OSError:
            return 1
        if not n:
            return status

        chunk = view[:n]
        try:
            primary.write(chunk)
            primary.flush()
        except OSError:
            return 1

        if secondary is not None:
            try:
                secondary.write(chunk)
                secondary.flush()
            except OSError:
                secondary = None
                status = 1


def preprocess_argv(args_list):
    """Translates the bare 'help' and 'version' words to their flags."""
    if len(args_list) == 1 and args_list[0] in ALIASES:
        return [ALIASES[args_list[0]]]
    return list(args_list)


def build_parser():
    parser = argparse.ArgumentParser(
        prog='teerr',
        description="Copy standard input to standard output and standard error.",
        usage="%(prog)s [fd]",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        '-V', '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )
    parser.add_argument(
        'fd',
        nargs='?',
        help='file descriptor to write to instead of stderr (default: 2)'
    )
    return parser


def main(argv=None):
    """Parses arguments, resolves the second stream and runs the relay."""
    program_name = os.path.basename(sys.argv[0])
    if argv is None:
        argv = sys.argv[1:]

    parser = build_parser()
    args = parser.parse_args(preprocess_argv(argv))

    try:
        secondary = resolve_secondary(args.fd)
    except ValueError as e:
        parser.error(str(e))
    except OSError as e:
        print(f"{program_name}: {args.fd}: {e.strerror}", file=sys.stderr)
        sys.exit(1)

    try:
        exit_status = relay(sys.stdin.buffer, sys.stdout.buffer, secondary)
    except KeyboardInterrupt:
        exit_status = 130

    try:
        sys.stdout.flush()
    except BrokenPipeError:
        # The reader went away with bytes still buffered; point stdout at
        # devnull so the flush at interpreter exit has nowhere to fail.
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
        exit_status = 1

    sys.exit(exit_status)


if __name__ == "__main__":
    main()
