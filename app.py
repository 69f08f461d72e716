# app.py
import pandas as pd
import streamlit as st

from timetable_ga.catalog import Catalog, CatalogError
from timetable_ga.data_loader import parse_catalog
from timetable_ga.config import GAConfig
from timetable_ga.evaluation import evaluate
from timetable_ga.ga import GeneticSolver
from timetable_ga.report import individual_to_dataframe, summary, timetable_grid
from timetable_ga.validation import check_feasibility, validate_catalog

# --- PAGE CONFIG ---
st.set_page_config(page_title="Timetable Generator", layout="wide", initial_sidebar_state="expanded")


# --- HELPERS ---
def parse_upload(upload) -> Catalog:
    return parse_catalog(upload.getvalue().decode("utf-8"), upload.name)


def occupancy_frame(occ, entity_idx, catalog: Catalog) -> pd.DataFrame:
    """Day x time-slot counts for one entity (0=free, 1=busy, >1=clash)."""
    return pd.DataFrame(
        occ[entity_idx].T,
        index=[s.label for s in catalog.time_slots],
        columns=catalog.days,
    )


def style_conflicts(df: pd.DataFrame):
    return df.style.map(lambda v: "background-color: #ff4b4b; color: white" if v > 1 else "")


# --- MAIN APP ---
def main():
    for key in ("catalog", "best", "eval_res", "history", "stop_reason"):
        if key not in st.session_state:
            st.session_state[key] = None

    with st.sidebar:
        st.title("🧬 Timetable GA")
        upload = st.file_uploader("Catalog (JSON / YAML)", type=["json", "yaml", "yml"])
        st.markdown("---")
        pop_size = st.number_input("Population", min_value=10, max_value=1000, value=100, step=10)
        generations = st.number_input("Generations", min_value=1, max_value=5000, value=300, step=50)
        mutation_rate = st.slider("Mutation rate", 0.0, 1.0, 0.15, 0.01)
        crossover_rate = st.slider("Crossover rate", 0.0, 1.0, 0.85, 0.01)
        seed = st.number_input("Seed", min_value=0, value=42, step=1)
        time_limit = st.number_input("Time limit (s, 0 = none)", min_value=0.0, value=0.0, step=5.0)

    st.header("Weekly timetable")
    if upload is None:
        st.info("Upload a catalog with standards, faculty, classrooms, days, time slots and assignments.")
        return

    try:
        catalog = parse_upload(upload)
    except (CatalogError, UnicodeDecodeError) as exc:
        st.error(f"Could not read catalog: {exc}")
        return

    errors = validate_catalog(catalog)
    if errors:
        st.error(", ".join(errors))
        return
    feasibility = check_feasibility(catalog)
    if not feasibility.is_possible:
        st.error(feasibility.reason)
        return

    c1, c2, c3 = st.columns(3)
    c1.metric("Classes to place", catalog.total_demand)
    c2.metric("Classrooms", len(catalog.classrooms))
    c3.metric("Day/slot combinations", len(catalog.days) * len(catalog.time_slots))

    if st.button("🚀 Generate timetable"):
        cfg = GAConfig(
            population_size=int(pop_size),
            generations=int(generations),
            mutation_rate=float(mutation_rate),
            crossover_rate=float(crossover_rate),
            seed=int(seed),
            time_limit_sec=float(time_limit) or None,
        )
        with st.spinner("Evolving population..."):
            solver = GeneticSolver(catalog, cfg)
            best = solver.evolve()
            st.session_state.eval_res = evaluate(best, catalog, cfg, solver.conflict_weight)
        st.session_state.catalog = catalog
        st.session_state.best = best
        st.session_state.history = solver.history
        st.session_state.stop_reason = solver.stop_reason

    best = st.session_state.best
    if best is None or st.session_state.catalog is None:
        return
    catalog = st.session_state.catalog
    eval_res = st.session_state.eval_res

    stats = summary(best)
    m1, m2, m3, m4 = st.columns(4)
    m1.metric("Conflicts", stats["conflicts"])
    m2.metric("Fitness", f"{stats['fitness']:.2f}")
    m3.metric("Classes", stats["class_count"])
    m4.metric("Stopped by", st.session_state.stop_reason)
    if best.conflict_count > 0:
        st.warning(
            f"No conflict-free timetable found: faculty={eval_res.faculty}, "
            f"classroom={eval_res.classroom}, standard={eval_res.cohort}"
        )

    df_res = individual_to_dataframe(best, catalog)
    tab_grid, tab_list, tab_conf, tab_hist = st.tabs(["Timetable", "Classes", "Conflict matrices", "History"])
    with tab_grid:
        st.dataframe(timetable_grid(df_res), use_container_width=True)
    with tab_list:
        st.dataframe(df_res, use_container_width=True)
        csv = df_res.to_csv(index=False).encode("utf-8")
        st.download_button("📥 Download CSV", data=csv, file_name="timetable.csv", mime="text/csv")
    with tab_conf:
        mode = st.radio("Entity", ["Faculty", "Classroom", "Standard"], horizontal=True)
        if mode == "Faculty":
            names = [f.name for f in catalog.faculty]
            occ = eval_res.faculty_occupancy
        elif mode == "Classroom":
            names = list(catalog.classrooms)
            occ = eval_res.classroom_occupancy
        else:
            names = [c.name for c in catalog.cohorts]
            occ = eval_res.cohort_occupancy
        if names:
            choice = st.selectbox(mode, range(min(len(names), occ.shape[0])), format_func=lambda i: names[i])
            st.dataframe(style_conflicts(occupancy_frame(occ, choice, catalog)))
    with tab_hist:
        if st.session_state.history:
            hist = pd.DataFrame(st.session_state.history).set_index("gen")
            st.line_chart(hist[["best_fitness", "avg_fitness"]])


if __name__ == "__main__":
    main()
