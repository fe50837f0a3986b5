import pandas as pd
from sqlalchemy import create_engine, inspect
from delivery_analytics.loading.writer import export_results_to_csv, load_report_tables

RESULTS = {
    'city_revenue_ranking': pd.DataFrame({'city': ['Mumbai', 'Delhi'], 'total_revenue': [900.0, 450.0], 'rank': [1, 2]}),
    'churned_customers': pd.DataFrame(columns=['customer_id', 'customer_name']),
}


def test_export_results_to_csv_keeps_empty_reports(tmp_path):
    exported = export_results_to_csv(RESULTS, str(tmp_path / 'out'))

    assert sorted(exported) == ['churned_customers', 'city_revenue_ranking']
    assert pd.read_csv(exported['city_revenue_ranking'])['city'].tolist() == ['Mumbai', 'Delhi']
    with open(exported['churned_customers']) as f:
        assert f.read().strip() == 'customer_id,customer_name'


def test_load_report_tables_replaces_contents(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'reports.db'}")

    load_report_tables(engine, RESULTS)
    written = load_report_tables(engine, RESULTS)

    assert written == {'report_city_revenue_ranking': 2, 'report_churned_customers': 0}
    assert 'report_city_revenue_ranking' in inspect(engine).get_table_names()
    stored = pd.read_sql("SELECT * FROM report_city_revenue_ranking", engine)
    assert stored['total_revenue'].tolist() == [900.0, 450.0]
    engine.dispose()
