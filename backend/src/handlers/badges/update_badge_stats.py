"""
Update Badge Stats Handler.
Triggered by DynamoDB Streams on the task applications table.
Folds pay and rating into the worker's category badge when a paid task is completed.
"""
from botocore.exceptions import ClientError
from skillgate.badge_store import DynamoBadgeStore, LedgerError
from skillgate.dynamo import from_stream_image
from skillgate.ledger import BadgeLedger
from skillgate.logging import logger
from skillgate.models import ApplicationStatus


def build_ledger():
    return BadgeLedger(DynamoBadgeStore())


def handler(event, context):
    """
    Listens for MODIFY events where status changes to 'Completed'.

    The stream trigger runs with ReportBatchItemFailures: on a storage or
    ledger fault the failed record is reported and processing stops, so the
    retry resumes there instead of replaying records already counted.
    """
    if 'Records' not in event:
        return {'message': 'No records to process', 'batchItemFailures': []}

    ledger = build_ledger()
    processed = 0
    for record in event['Records']:
        if record.get('eventName') != 'MODIFY':
            continue
        try:
            if process_record(record, ledger):
                processed += 1
        except (KeyError, ValueError) as e:
            # Malformed record
            logger.error(f"Skipping bad record {record.get('eventID')}: {e}")
        except (ClientError, LedgerError) as e:
            sequence_number = record['dynamodb']['SequenceNumber']
            logger.error(f"Badge update failed at record {sequence_number}: {e}")
            return {
                'message': f'Processed {processed} records',
                'batchItemFailures': [{'itemIdentifier': sequence_number}]
            }

    return {'message': f'Processed {processed} records', 'batchItemFailures': []}


def process_record(record, ledger) -> bool:
    """
    Process a single DynamoDB Stream record.
    Returns True if a badge was updated, False otherwise.
    """
    new_image = from_stream_image(record['dynamodb'].get('NewImage'))
    old_image = from_stream_image(record['dynamodb'].get('OldImage'))

    # Only the transition into Completed counts; later edits must not re-count
    if new_image.get('status') != ApplicationStatus.COMPLETED:
        return False
    if old_image.get('status') == ApplicationStatus.COMPLETED:
        return False

    worker_id = new_image.get('workerId')
    category = new_image.get('category')
    if not worker_id or not category:
        logger.warning(f"Application {new_image.get('applicationId')} missing workerId or category")
        return False

    rating = new_image.get('rating')
    badge = ledger.accumulate(
        worker_id,
        category,
        pay_amount=new_image.get('payAmount', 0),
        rating=float(rating) if rating is not None else None
    )
    if badge is None:
        return False

    logger.info(f"Worker {worker_id} {category} badge: level={badge.badge_level}, "
                f"tasks={badge.tasks_completed}, rating={badge.average_rating}")
    return True
