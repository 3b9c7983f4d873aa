import sys
import zipfile
from pathlib import Path

from scm_core.protocol import layout_for_store


def main():
    if len(sys.argv) != 4:
        print("Usage: corrupt_one_byte.py <file.scm> <store> <record_index>")
        raise SystemExit(2)

    p = Path(sys.argv[1])
    store = sys.argv[2]
    index = int(sys.argv[3])
    layout = layout_for_store(store)

    with zipfile.ZipFile(p) as zf:
        members = [(info, zf.read(info)) for info in zf.infolist()]

    for info, data in members:
        if info.filename == store:
            break
    else:
        print(f"Store {store} not in {p}")
        raise SystemExit(2)

    b = bytearray(data)
    if (index + 1) * layout.record_size > len(b):
        print("Record index out of range.")
        raise SystemExit(2)

    # Flip one bit inside the name field; the checksum byte is left stale.
    idx = index * layout.record_size + layout.name_offset
    b[idx] ^= 0x01

    with zipfile.ZipFile(p, "w") as zf:
        for info, data in members:
            zf.writestr(info, bytes(b) if info.filename == store else data)
    print(f"Corrupted 1 byte at offset {idx} in {p}:{store}")

if __name__ == "__main__":
    main()
