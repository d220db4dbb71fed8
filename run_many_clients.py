import subprocess
import sys

NUM_CLIENTS = 4
HOST = "127.0.0.1"
PORT = 4000
PASSWORD = "sparring"

finished = 0
failed = 0


def print_last_lines(index: int, name: str, out: str, result_label: str) -> None:
    """Print the tail of one client's output, from its last game on."""
    lines = out.splitlines()
    print("\n======================")
    print(f"       CLIENT {index} ({name})")
    print("======================")
    if not lines:
        print("[No output captured]")
        print(result_label)
        return

    last_game_idx = -1
    for i, line in enumerate(lines):
        if "New game has started" in line:
            last_game_idx = i

    if last_game_idx == -1:
        snippet = lines[-10:]
    else:
        snippet = lines[last_game_idx:]

    print("\n".join(snippet))
    print(result_label)


processes = []
for i in range(1, NUM_CLIENTS + 1):
    name = f"MCP-{i}"
    p = subprocess.Popen(
        [
            sys.executable, "-m", "gridagents.MCP.client",
            "--host", HOST,
            "--port", str(PORT),
            "--username", name,
            "--password", PASSWORD,
            "--greeting", "",
            "--no-stdin",
        ],
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
    )
    processes.append((name, p))

try:
    for i, (name, p) in enumerate(processes, start=1):
        out, _ = p.communicate()
        if p.returncode == 0:
            finished += 1
            result_label = f"Result: {name} stopped normally"
        else:
            failed += 1
            result_label = f"Result: {name} exited with status {p.returncode}"
        print_last_lines(i, name, out, result_label)
except KeyboardInterrupt:
    print("\nStopping all clients...")
    for _, p in processes:
        p.terminate()

print("\n======================")
print(f"Summary over {NUM_CLIENTS} clients:")
print(f"Stopped normally: {finished}")
print(f"Failed: {failed}")
print("======================")
