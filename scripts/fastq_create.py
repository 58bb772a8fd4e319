import dnaio

LENGTHS = (1500, 2100, 1800, 3000, 249, 2500, 1900, 2200, 1682, 2000)
PATTERNS = ("ACGTA", "GGCAT")

with dnaio.open("tests/data/ten_reads.fastq", mode="w") as fastq:
    for i, length in enumerate(LENGTHS):
        pattern = PATTERNS[i % 2]
        seq = dnaio.SequenceRecord(
            name=f"read_{i + 1} sample=ten_reads",
            sequence="".join(pattern[j % 5] for j in range(length)),
            qualities="".join(chr(33 + (i * 3 + j) % 42)
                              for j in range(length)),
        )
        fastq.write(seq)
