from pathlib import Path

import pandas as pd

from movierec.config import load_app_config


def main() -> None:
    report_path = load_app_config().paths.report_path
    report = pd.read_csv(report_path, encoding="utf-8-sig", dtype=str, keep_default_na=False)

    counts = (
        report.groupby(["record_type", "reason"])
        .size()
        .reset_index(name="failures")
        .sort_values(["record_type", "failures"], ascending=[True, False])
    )

    rows = "\n".join(
        f"| {r.record_type} | {r.reason} | {r.failures} |" for r in counts.itertuples(index=False)
    )

    md = f"""# Validation Summary

- Report: `{report_path}`
- Failed checks: **{len(report)}**

| Record | Reason | Count |
|---|---|---:|
{rows}
"""

    Path("validation_summary.md").write_text(md)
    print("Wrote validation_summary.md")


if __name__ == "__main__":
    main()
