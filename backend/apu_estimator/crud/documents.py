from sqlalchemy.orm import Session
from apu_estimator.db.models.document import StoredDocument

def get_document(db: Session, key: str) -> StoredDocument | None:
    return db.query(StoredDocument).filter(StoredDocument.key == key).one_or_none()

def put_document(db: Session, key: str, payload: str) -> StoredDocument:
    doc = get_document(db, key)
    if doc is None:
        doc = StoredDocument(key=key, payload=payload)
        db.add(doc)
    else:
        doc.payload = payload
    db.commit()
    return doc

def delete_document(db: Session, key: str) -> bool:
    n = db.query(StoredDocument).filter(StoredDocument.key == key).delete()
    db.commit()
    return n > 0
