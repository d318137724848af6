import streamlit as st

st.title("📚 Methodology")

st.markdown("""
## Scope
The dashboard shows AWS spend from **Cost Explorer** (`UnblendedCost`, daily granularity),
grouped by **service** and **usage type**, for a look-back window (30 days by default).

---

## Aggregation Rules

- **Noise filter**: line items of **$0.01 or less** are dropped before anything is summed.
- **Total cost**: sum of the remaining line items.
- **Per service**: sum of its line items; **percentage** = service cost / total cost × 100.
- **Usage types** inside a service and **services** inside a day are summed the same way,
  and entries of $0.01 or less are dropped again after summing.
- **Ordering**: services, usage types and each day's services are sorted by cost (largest first);
  days are sorted by date. Equal costs keep the order they first appeared in.
- **Empty window**: if nothing is left after the noise filter, no summary is produced
  (percentages would be undefined) and the dashboard says so.

> Amounts are summed at full precision; they are only rounded to cents on screen.

---

## Pie chart
The five most expensive services are shown individually; the rest are folded into **Others**
(their costs and percentages are summed).

---

## Pipeline
1. **Lambda** calls Cost Explorer daily and aggregates the window.
2. Produces **cost_records.csv** (raw line items) and **cost_summary.json** → stored in **S3**.
3. The dashboard reads the latest summary from S3, queries Cost Explorer live, or aggregates an uploaded CSV.

---

## Assumptions & Limitations
- A single currency (USD); no conversion.
- Cost Explorer data for the current day is incomplete until AWS finalises it.
- Credits and refunds (negative amounts) are not included.
""")
