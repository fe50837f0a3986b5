"""
Main pipeline orchestration for the food delivery analytics pipeline.
"""
import logging
import argparse
import time
import traceback
from datetime import date, datetime
from delivery_analytics.config import Config
from delivery_analytics.db.engine import create_db_engine, init_db
from delivery_analytics.db.models import Base
from delivery_analytics.ingestion.loader import load_source_data, write_source_data, load_snapshot_from_database
from delivery_analytics.ingestion.sample_data import write_sample_data
from delivery_analytics.transformation.quality import run_data_quality_checks, count_issues
from delivery_analytics.transformation.reports import REPORTS, run_reports
from delivery_analytics.transformation.snapshot import Snapshot
from delivery_analytics.loading.writer import load_report_tables, export_results_to_csv

logger = logging.getLogger(__name__)


def run_pipeline(config_file='config.ini', source=None, load=False, reference_date=None,
                 customer_name=None, report_names=None, export_csv=False, write_db=None,
                 quality_check=None, sample_orders=None):
    start_time = time.time()
    statistics = {
        'start_time': datetime.now().strftime('%Y-%m-%d %H:%M:%S'),
        'status': 'failed',
        'stages': {},
        'results': {}
    }

    try:
        logger.info("Starting analytics pipeline")

        # Load configuration
        config = Config(config_file)

        # Override config settings if provided
        if source is not None:
            config.config['PIPELINE']['source'] = source

        if quality_check is not None:
            config.config['PIPELINE']['quality_check'] = str(quality_check).lower()

        if write_db is not None:
            config.config['PIPELINE']['write_db'] = str(write_db).lower()

        if reference_date is not None:
            config.config['ANALYSIS']['reference_date'] = str(reference_date)

        if customer_name is not None:
            config.config['ANALYSIS']['customer_name'] = customer_name

        data_source = config.get_source()
        run_quality_check = config.is_quality_check_enabled()
        run_db_write = config.is_db_write_enabled()

        logger.info(f"Pipeline mode: source={data_source}, load={load}, quality_check={run_quality_check}")

        # ---- Sample data
        if sample_orders:
            stage_start = time.time()
            written = write_sample_data(config.get_input_path(), n_orders=sample_orders)
            statistics['stages']['sample_data'] = {
                'duration': time.time() - stage_start,
                'orders': sample_orders,
                'files_written': len(written)
            }

        engine = None
        if data_source == 'database' or load or run_db_write:
            engine = create_db_engine(config)
            init_db(engine, Base)

        # ---- Data Ingestion
        data_frames = None
        if data_source == 'csv' or load:
            stage_start = time.time()
            data_frames = load_source_data(config)
            statistics['stages']['ingestion'] = {
                'duration': time.time() - stage_start,
                'rows_processed': {
                    table: len(df) for table, df in data_frames.items()
                }
            }

            # ---- Data Validation & Quality Checks
            if run_quality_check:
                stage_start = time.time()
                quality_results = run_data_quality_checks(data_frames)
                issues = count_issues(quality_results)
                statistics['stages']['quality_check'] = {
                    'duration': time.time() - stage_start,
                    'issues_found': issues
                }

            # ---- Bulk load into the database
            if load:
                stage_start = time.time()
                loaded = write_source_data(engine, data_frames)
                statistics['stages']['database_load'] = {
                    'duration': time.time() - stage_start,
                    'rows_processed': loaded
                }

        # ---- Snapshot
        stage_start = time.time()
        if data_source == 'database':
            snapshot = load_snapshot_from_database(engine)
        else:
            snapshot = Snapshot.from_frames(data_frames)

        statistics['stages']['snapshot'] = {
            'duration': time.time() - stage_start,
            'orders': len(snapshot)
        }

        # ---- Reports
        stage_start = time.time()
        params = config.get_analysis_params()
        results = run_reports(snapshot, params, report_names)

        statistics['results'] = results
        statistics['stages']['reports'] = {
            'duration': time.time() - stage_start,
            'reports_run': len(results),
            'rows_generated': {
                name: len(df) for name, df in results.items()
            }
        }

        # ---- Loading
        if run_db_write:
            stage_start = time.time()
            written = load_report_tables(engine, results)
            statistics['stages']['loading'] = {
                'duration': time.time() - stage_start,
                'tables_written': len(written)
            }

        # Export results to CSV if requested
        if export_csv:
            exported_files = export_results_to_csv(
                results,
                config.get_output_path()
            )
            statistics['stages']['export'] = {
                'files_exported': len(exported_files),
                'file_paths': exported_files
            }

        statistics['status'] = 'success'
        logger.info("Analytics pipeline completed successfully")

    except Exception as e:
        logger.error(f"Pipeline execution failed: {str(e)}")
        logger.error(traceback.format_exc())
        statistics['status'] = 'failed'
        statistics['error'] = str(e)

    # Calculate total duration
    statistics['duration'] = time.time() - start_time

    return statistics


# Per-stage keys too long for the console summary
SUMMARY_SKIP_KEYS = {'rows_processed', 'rows_generated', 'file_paths'}


def _print_summary(statistics, preview_rows=10):
    print(f"\nPipeline {statistics['status']} in {statistics['duration']:.2f} seconds")
    if statistics.get('error'):
        print(f"Error: {statistics['error']}")

    for stage, stats in statistics['stages'].items():
        details = ', '.join(f"{key}={value}" for key, value in stats.items() if key not in SUMMARY_SKIP_KEYS)
        print(f"  {stage}: {details}")

    for name, df in statistics['results'].items():
        print(f"\n{name} ({len(df)} rows)")
        print(df.head(preview_rows).to_string(index=False))


def main(argv=None):
    """Command line entry point."""
    parser = argparse.ArgumentParser(description='Food Delivery Analytics')
    parser.add_argument('--config', default='config.ini', help='Path to configuration file')
    parser.add_argument('--source', choices=['csv', 'database'], help='Read the snapshot from CSV files or the database')
    parser.add_argument('--load', action='store_true', help='Bulk load the CSV files into the database first')
    parser.add_argument('--reference-date', type=date.fromisoformat, help='Reference date (YYYY-MM-DD) for trailing-year reports')
    parser.add_argument('--customer', help='Customer name for the top dishes report')
    parser.add_argument('--report', action='append', choices=list(REPORTS), help='Report to run; repeat for several (default: all)')
    parser.add_argument('--export-csv', action='store_true', help='Export results to CSV files')
    parser.add_argument('--write-db', action='store_true', help='Write results to report tables')
    parser.add_argument('--generate-sample', type=int, metavar='N', help='Generate a sample data set with N orders first')
    checks = parser.add_mutually_exclusive_group()
    checks.add_argument('--quality-check', dest='quality_check', action='store_const', const=True, help='Run data quality checks')
    checks.add_argument('--no-quality-check', dest='quality_check', action='store_const', const=False, help='Skip data quality checks')

    args = parser.parse_args(argv)

    statistics = run_pipeline(
        config_file=args.config,
        source=args.source,
        load=args.load,
        reference_date=args.reference_date,
        customer_name=args.customer,
        report_names=args.report,
        export_csv=args.export_csv,
        write_db=True if args.write_db else None,
        quality_check=args.quality_check,
        sample_orders=args.generate_sample
    )

    _print_summary(statistics)
    return 0 if statistics['status'] == 'success' else 1


if __name__ == "__main__":
    raise SystemExit(main())
