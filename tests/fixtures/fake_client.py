"""Stand-in for the remote-shell client used by transport tests.

Accepts the same arguments (``[-batch] -v -ssh -pw SECRET user@host``),
then behaves like a switch CLI on stdin/stdout.
"""

import sys

TABLE = [
    "Vlan    Mac Address       Type        Ports",
    "10      aaaa.bbbb.cccc    DYNAMIC     Gi1/0/1",
]


def main(argv):
    batch = "-batch" in argv
    secret = argv[argv.index("-pw") + 1]
    user, _, host = argv[-1].partition("@")
    name = host.split(".")[0]

    sys.stderr.write(f"Looking up host \"{host}\" for SSH connection\n")
    if host.startswith("unknown"):
        sys.stderr.write("The host key is not cached for this server:\n")
        if batch:
            sys.stderr.write("Connection abandoned.\n")
            return 1
        answer = sys.stdin.buffer.readline()
        if answer.strip() not in (b"y", b"n"):
            sys.stderr.write("Connection abandoned.\n")
            return 1
    if secret != "s3cret":
        sys.stderr.write("Access denied\n")
        return 1
    sys.stderr.write(f"Using username \"{user}\".\n")

    for raw in sys.stdin.buffer:
        if raw.endswith(b"\r\n"):
            sys.stderr.write("got CRLF terminator\n")
            return 3
        line = raw.decode().rstrip("\n")
        sys.stdout.write(f"{name}>{line}\n")
        if line == "exit":
            return 0
        if line.startswith("sh"):
            sys.stdout.write("\n".join(TABLE) + "\n")
        if line == "flood":
            # more than a pipe buffer's worth on both streams
            sys.stderr.write("e" * 200_000 + "\n")
            sys.stdout.write("o" * 200_000 + "\n")
        sys.stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
