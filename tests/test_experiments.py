import csv

import pytest

import experiments as exp
import huffman as huff


def _read_rows(path):
    with path.open(newline="", encoding="utf-8") as f:
        return list(csv.DictReader(f))


def test_pack_bits_pads_last_byte():
    assert exp.pack_bits("") == (b"", 0)
    assert exp.pack_bits("10000000") == (b"\x80", 0)
    assert exp.pack_bits("101") == (b"\xa0", 5)
    assert exp.pack_bits("111111111") == (b"\xff\x80", 7)


def test_unpack_bits_drops_pad():
    assert exp.unpack_bits(b"\xa0", 5) == "101"
    assert exp.unpack_bits(b"\xff\x80", 7) == "111111111"
    assert exp.unpack_bits(b"", 0) == ""


def test_packed_compressor_output_decodes():
    result = huff.compress(exp.gen_english_like(2000, seed=3))
    packed, pad_bits = exp.pack_bits(result.encoded_bits)
    assert len(packed) * 8 - pad_bits == result.encoded_bit_length
    bits = exp.unpack_bits(packed, pad_bits)
    assert bytes(huff.decode(bits, result.tree)) == exp.gen_english_like(2000, seed=3)


@pytest.mark.parametrize("packed, pad_bits", [(b"\x00", 8), (b"\x00", -1), (b"", 3)])
def test_unpack_bits_rejects_bad_pad(packed, pad_bits):
    with pytest.raises(ValueError):
        exp.unpack_bits(packed, pad_bits)


def test_generators_are_deterministic_and_bounded():
    assert exp.gen_uniform(100, seed=1) == exp.gen_uniform(100, seed=1)
    assert exp.gen_uniform(100, seed=1) != exp.gen_uniform(100, seed=2)
    assert len(exp.gen_repetitive(64, seed=5)) == 64
    assert max(exp.gen_zipf_like(500, alphabet=8, seed=2)) < 8
    assert set(exp.gen_geometric(1000, alphabet=4, seed=9)) <= {0, 1, 2, 3}
    for name, fn in exp.GENERATOR_REGISTRY.items():
        assert len(fn(256, 0)) == 256, name


def test_geometric_data_is_skewed():
    data = exp.gen_geometric(20_000, alphabet=4, seed=1)
    counts = [data.count(i) for i in range(4)]
    assert counts[0] > counts[1] > counts[2]


def test_generate_dataset_falls_back_to_uniform():
    name, data = exp.generate_dataset("no_such_generator", 128, seed=0)
    assert name == "no_such_generator_fallback_uniform256"
    assert data == exp.gen_uniform(128, alphabet=256, seed=0)


def test_run_one_reports_consistent_metrics():
    data = exp.gen_english_like(4096, seed=11)
    row = exp.run_one(data)
    assert row.correctness_ok == 1
    assert row.file_size_bytes == 4096
    assert row.original_bits == 4096 * 8
    assert row.packed_bytes == (row.encoded_bits + 7) // 8
    assert row.pad_bits == row.packed_bytes * 8 - row.encoded_bits
    assert row.compression_ratio < 1
    assert row.entropy_bits <= row.avg_code_length < row.entropy_bits + 1
    assert row.max_code_length >= 1


def test_run_one_single_symbol():
    row = exp.run_one(b"AAAA")
    assert row.correctness_ok == 1
    assert row.unique_symbols == 1
    assert row.encoded_bits == 4
    assert row.pad_bits == 4
    assert row.max_code_length == 1
    assert row.entropy_bits == 0.0


def test_run_one_empty_input():
    with pytest.raises(huff.EmptyInput):
        exp.run_one(b"")


def test_write_csv_and_summary(tmp_path):
    rows = []
    for run_id in (1, 2):
        row = exp.run_one(exp.gen_zipf_like(1024, alphabet=16, seed=run_id))
        row.exp_name = "exp1_distribution"
        row.dataset_name = "zipf16"
        row.run_id = run_id
        rows.append(row)

    exp.write_csv(tmp_path / "metrics.csv", rows)
    exp.group_summary(rows, tmp_path / "summary.csv")

    metrics = _read_rows(tmp_path / "metrics.csv")
    assert len(metrics) == 2
    assert metrics[0]["dataset_name"] == "zipf16"

    summary = _read_rows(tmp_path / "summary.csv")
    assert len(summary) == 1
    assert summary[0]["n_runs"] == "2"
    assert float(summary[0]["correctness_ok_rate"]) == 1.0


def test_main_writes_csv_without_plots(tmp_path, capsys):
    empty = tmp_path / "empty.txt"
    empty.write_bytes(b"")
    text = tmp_path / "notes.txt"
    text.write_text("the quick brown fox jumps over the lazy dog\n" * 20, encoding="utf-8")

    code = exp.main([
        "--outdir", str(tmp_path / "out"),
        "--runs", "1",
        "--no_exp2", "--no_exp3", "--no_plots",
        "--exp1_size_kb", "1",
        "--exp1_generators", "uniform256,english_like",
        "--files", f"{empty},{text}",
    ])
    assert code == 0

    metrics = _read_rows(tmp_path / "out" / "metrics.csv")
    assert [r["dataset_name"] for r in metrics] == ["uniform256", "english_like", "file_notes.txt"]
    assert all(r["correctness_ok"] == "1" for r in metrics)

    out = capsys.readouterr().out
    assert "Skipping" in out
    assert "Correctness rate across all runs: 1.000" in out
    assert not list((tmp_path / "out").glob("*.png"))


def test_main_writes_charts(tmp_path):
    outdir = tmp_path / "charts"
    code = exp.main([
        "--outdir", str(outdir),
        "--runs", "1",
        "--exp1_size_kb", "1",
        "--exp1_generators", "zipf64",
        "--no_exp2",
        "--exp3_size_kb", "1", "--exp3_max_alphabet", "4",
    ])
    assert code == 0
    assert (outdir / "exp1_code_length.png").exists()
    assert (outdir / "exp3_tree_depth.png").exists()
    assert (outdir / "exp3_redundancy.png").exists()

    summary = _read_rows(outdir / "summary.csv")
    exp3 = [r for r in summary if r["exp_name"] == "exp3_alphabet_depth"]
    assert sorted({r["alphabet_size"] for r in exp3}) == ["2", "4"]
    assert sorted({r["dataset_name"] for r in exp3}) == ["geometric", "uniform", "zipf"]


def test_plot_size_scaling(tmp_path):
    rows = []
    for size in (256, 512):
        row = exp.run_one(exp.gen_uniform(size, alphabet=32, seed=size))
        row.exp_name = "exp2_size_scaling"
        row.dataset_name = "uniform32"
        rows.append(row)
    exp.plot_experiment_2(rows, tmp_path)
    assert (tmp_path / "exp2_time_uniform32.png").exists()
    assert (tmp_path / "exp2_compression_ratio_uniform32.png").exists()
