import os
import pandas as pd
from sqlalchemy import create_engine, inspect
from conftest import DELIVERIES, make_frames
from delivery_analytics.main import main, run_pipeline
from delivery_analytics.transformation.reports import REPORTS


def test_pipeline_from_csv(config_file, write_csv_sources):
    write_csv_sources()
    stats = run_pipeline(config_file=str(config_file()))

    assert stats['status'] == 'success'
    assert list(stats['results']) == list(REPORTS)
    assert stats['stages']['snapshot']['orders'] == 8
    assert stats['stages']['quality_check']['issues_found'] == 0
    assert 'database_load' not in stats['stages']


def test_pipeline_exports_csv(config_file, write_csv_sources, tmp_path):
    write_csv_sources()
    stats = run_pipeline(config_file=str(config_file()), export_csv=True,
                         report_names=['city_revenue_ranking'])

    assert stats['status'] == 'success'
    path = stats['stages']['export']['file_paths']['city_revenue_ranking']
    assert path == os.path.join(str(tmp_path / 'output'), 'city_revenue_ranking.csv')
    assert pd.read_csv(path)['city'].tolist() == ['Mumbai', 'Delhi']


def test_pipeline_loads_then_reads_database(config_file, write_csv_sources, tmp_path):
    write_csv_sources()
    stats = run_pipeline(config_file=str(config_file(source='database')), load=True, write_db=True)

    assert stats['status'] == 'success'
    assert stats['stages']['database_load']['rows_processed']['orders'] == 8
    assert stats['stages']['loading']['tables_written'] == len(REPORTS)

    engine = create_engine(f"sqlite:///{tmp_path / 'analytics.db'}")
    tables = inspect(engine).get_table_names()
    assert 'orders' in tables
    assert 'report_customer_lifetime_value' in tables
    engine.dispose()

    lifetime = stats['results']['customer_lifetime_value']
    assert lifetime['total_revenue'].tolist() == [1170.0, 750.0, 550.0]


def test_pipeline_overrides_customer(config_file, write_csv_sources):
    write_csv_sources()
    stats = run_pipeline(config_file=str(config_file()), customer_name='Rahul Verma',
                         report_names=['top_dishes_for_customer'])

    result = stats['results']['top_dishes_for_customer']
    assert set(result['customer_name']) == {'Rahul Verma'}


def test_pipeline_reports_missing_source_file(config_file, tmp_path):
    stats = run_pipeline(config_file=str(config_file()))

    assert stats['status'] == 'failed'
    assert 'customers.csv' in stats['error']


def test_pipeline_rejects_orphans(config_file, write_csv_sources):
    write_csv_sources(make_frames(deliveries=DELIVERIES + [(8, 99, 'Delivered', '12:00:00', 1)]))
    stats = run_pipeline(config_file=str(config_file()), quality_check=False)

    assert stats['status'] == 'failed'
    assert 'rejected' in stats['error']


def test_pipeline_with_generated_sample(config_file):
    stats = run_pipeline(config_file=str(config_file()), sample_orders=150,
                         report_names=['popular_time_slots'])

    assert stats['status'] == 'success'
    assert stats['stages']['sample_data']['files_written'] == 5
    assert stats['results']['popular_time_slots']['total_orders'].sum() == 150


def test_main_returns_exit_code(config_file, write_csv_sources, capsys):
    input_dir = write_csv_sources()
    path = str(config_file())

    assert main(['--config', path, '--report', 'churned_customers']) == 0
    assert 'Pipeline success' in capsys.readouterr().out

    (input_dir / 'orders.csv').unlink()
    assert main(['--config', path]) == 1
    assert 'Pipeline failed' in capsys.readouterr().out
