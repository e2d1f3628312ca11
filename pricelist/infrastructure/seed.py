"""Database bootstrap — table creation, default data and legacy cost sync."""

import structlog
from sqlalchemy import func, or_
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from pricelist.config import get_settings
from pricelist.domain.models.category import Category
from pricelist.domain.models.product import Product
from pricelist.domain.models.setting import Setting
from pricelist.infrastructure.database import Base

settings = get_settings()
logger = structlog.get_logger(__name__)

CATEGORY_NAMES = [
    "عام", "1970", "اليغانس", "ماستر", "كينغ دوم", "كابتن بلاك",
    "روز", "مالبو", "اوسكار", "مشكل", "أن أن تركي", "تي أس",
    "مانشستر", "بلاتينيوم", "غلواز", "معسل", "فحم", "فيب", "قداحات", "اركيلة",
]

# (category, name, carton_usd, wholesale_carton_usd)
SEED_PRODUCTS = [
    ("عام", "مالبورو ابيض كرتون حرة الاصلي", 22.56, 22.30),
    ("عام", "مالبورو احمر كرتون حرة الاصلي", 24.61, 24.60),
    ("عام", "مالبورو كرتون سلفر بلو حرة", 0, 0),
    ("عام", "مالبورو فقسات دبل فيوجن دبل ميكس", 21.36, 21.00),
    ("عام", "مالبورو 3 فقسات قصير + سول شافل", 21.36, 21.00),
    ("عام", "دافيدووف سليم ابيض دهبي خمري", 14.52, 14.30),
    ("عام", "ونستون قصير ازرق و فضي حرة", 14.82, 14.50),
    ("1970", "1970ازرق طویل شركة", 4.74, 4.70),
    ("1970", "1970 فضي طويل شركة", 4.74, 4.70),
    ("1970", "1970ازرق قصیر", 4.31, 4.30),
    ("1970", "1970 قصير فضي", 3.93, 4.00),
    ("1970", "1970اورجینال قصیر", 3.24, 3.30),
    ("1970", "1970 كوين اسود", 4.52, 0),
    ("1970", "1970 كوين ازرق", 4.44, 4.50),
    ("1970", "1970أبیض كوین", 4.18, 4.20),
    ("1970", "1970 سليم فضي", 3.46, 3.46),
    ("1970", "1970نعنع سلیم", 4.10, 4.10),
    ("1970", "1970 سليم أزرق", 3.24, 3.20),
    ("اليغانس", "الیغانس طویل فضي", 4.44, 4.40),
    ("اليغانس", "الیغانس طویل فضي مخصص", 6.79, 7.00),
    ("اليغانس", "اليغانس طويل اسود", 4.95, 4.90),
    ("اليغانس", "الیغانس طویل ابیض مخصص", 4.52, 4.40),
    ("اليغانس", "الیغانس قصیر فضي مخصص", 5.38, 0),
    ("اليغانس", "اليغانس قصير فضي غير مخصص", 4.44, 4.04),
    ("اليغانس", "اليغانس قصير اسود مخصص", 4.35, 4.36),
    ("اليغانس", "الیغانس كوین أزرق مخصص شركة", 3.37, 3.40),
    ("اليغانس", "الیغانس كوین أبیض مخصص شركة", 3.37, 3.40),
    ("اليغانس", "الیغانس سليم ازرق جديد", 2.86, 2.86),
    ("اليغانس", "الیغانس سليم فضي جديد", 2.94, 2.90),
    ("اليغانس", "الیغانس سليم فضي قدیم طبعة مخصص", 4.05, 4.00),
    ("اليغانس", "اليغانس سليم ازرق قديم طبعة", 3.58, 3.60),
    ("اليغانس", "اليغانس سليم دهبي غولد", 3.46, 3.50),
    ("اليغانس", "الیغانس قصیر فقستين", 5.38, 5.06),
    ("اليغانس", "اليغانس كوين فقسة", 4.14, 4.16),
    ("اليغانس", "الیغانس سليم نعنع قديم", 3.58, 3.60),
    ("ماستر", "ماستر طویل أزرق", 5.55, 5.56),
    ("ماستر", "ماستر قصیر أزرق", 4.95, 5.00),
    ("ماستر", "ماستر قصير فضي", 4.95, 5.00),
    ("ماستر", "ماستر كوین أبیض", 6.45, 8.00),
    ("ماستر", "ماستر كوين ازرق", 6.58, 8.60),
    ("ماستر", "ماستر سليم فضي", 5.12, 5.10),
    ("ماستر", "ماستر سليم ازرق", 5.12, 5.10),
    ("كينغ دوم", "كينغ دوم طویل فضي مخصص شركة", 4.74, 4.74),
    ("كينغ دوم", "كينغ دوم قصير فضي دهبي احمر", 4.35, 4.32),
    ("كينغ دوم", "كينغ دوم كوین أبیض مخصص شركة", 4.14, 4.30),
    ("كينغ دوم", "كينغ دوم سليم أبيض مخصص شركة", 3.54, 3.54),
    ("كينغ دوم", "كينغ دوم سليم نعنع", 4.10, 3.66),
    ("كابتن بلاك", "كابتن بلاك سليم سكاي", 3.24, 3.26),
    ("كابتن بلاك", "كابتن بلاك سليم سلفر", 3.24, 3.26),
    ("كابتن بلاك", "كابتن بلاك كوين ابيض one", 3.93, 3.96),
    ("كابتن بلاك", "كابتن بلاك كوین ذھبي", 4.52, 4.52),
    ("كابتن بلاك", "كابتن بلاك طويل شوكولا", 11.92, 11.84),
    ("كابتن بلاك", "كابتن بلاك سليم ذھبي", 3.84, 3.86),
    ("روز", "روز طویل فضي", 4.10, 4.16),
    ("روز", "روز طویل أزرق", 4.05, 4.16),
    ("مالبو", "مالبو طویل أزرق", 3.97, 3.96),
    ("مالبو", "مالبو طويل فضي", 3.97, 3.96),
    ("مالبو", "مالبو كوين فضي", 3.76, 0),
    ("اوسكار", "اوسكار طویل فضي", 4.52, 4.60),
    ("اوسكار", "اوسكارسليم فضي", 3.88, 3.92),
    ("مشكل", "ميلانو كوين فضي ازرق اسود", 2.86, 2.84),
    ("مشكل", "ميلانو سليم فضي ابيض ازرق", 2.86, 2.84),
    ("مشكل", "بزنس رويال طويل فضي احمر ازرق", 2.86, 2.90),
    ("مشكل", "اوريس طقتين (بلوبيري)", 5.00, 5.00),
    ("مشكل", "اوريس بلس أزرق (طقة)", 4.35, 4.32),
    ("مشكل", "اوريس توت طقة", 4.35, 4.32),
    ("مشكل", "اوريس طقة منغا", 4.35, 4.32),
    ("مشكل", "اوريس شوكولا", 4.35, 4.32),
    ("مشكل", "اوريس تشكلش علكة ونعنع", 3.97, 4.10),
    ("مشكل", "اوريس كوين شوكولا", 4.65, 4.70),
    ("مشكل", "دنفر كوين", 4.52, 4.56),
    ("مشكل", "مليونير طويل فضي و ازرق", 3.54, 3.56),
    ("مشكل", "ويلسون احمر", 3.58, 3.60),
    ("مشكل", "ويلسون فضي", 3.58, 3.60),
    ("مشكل", "اختمار سليم فضي", 4.74, 4.80),
    ("مشكل", "جيتان قصير فرنسي", 8.29, 8.30),
    ("مشكل", "مادوكس كوين اسود", 3.84, 3.86),
    ("مشكل", "برو طويل فضي", 0, 0),
    ("مشكل", "سيدرز قصير فضي شركة", 6.45, 6.60),
    ("مشكل", "سيدرز طويل فضي شركة", 7.56, 7.80),
    ("مشكل", "سيدرز طويل ازرق", 7.43, 7.50),
    ("مشكل", "يونايتد طويل اجنبي", 4.74, 4.80),
    ("مشكل", "يونايتد طويل مخصص", 4.35, 4.36),
    ("أن أن تركي", "ان ان طویل أزرق + فضي", 3.63, 3.64),
    ("أن أن تركي", "ان ان كوين ابیض + فضي", 3.37, 3.40),
    ("أن أن تركي", "بارسا كوين", 3.80, 3.80),
    ("تي أس", "تي أس طویل فضي", 3.20, 3.20),
    ("تي أس", "تي أس طویل أزرق", 3.20, 3.16),
    ("مانشستر", "مانشستر طويل أحمر", 3.63, 3.60),
    ("مانشستر", "مانشستر طويل أزرق وفضي", 3.84, 3.80),
    ("مانشستر", "مانشستر قصير ازرق", 4.35, 4.30),
    ("مانشستر", "مانشسترقصیر فضي", 3.33, 3.40),
    ("مانشستر", "مانشستر قصير طقتين", 5.72, 5.80),
    ("مانشستر", "مانشستر سليم (نكهات)", 3.16, 3.30),
    ("بلاتينيوم", "بلاتينيوم طويل فضي", 3.07, 3.12),
    ("بلاتينيوم", "بلاتينيوم طويل أزرق", 3.07, 3.12),
    ("بلاتينيوم", "بلاتينيوم سليم فضي", 0, 2.94),
    ("بلاتينيوم", "بلاتينيوم سليم أزرق", 0, 2.94),
    ("بلاتينيوم", "بلاتينيوم سليم نعنع", 0, 3.24),
    ("بلاتينيوم", "بلاتينيوم كوول طقة", 0, 3.64),
    ("بلاتينيوم", "بلاتينيوم سليم فقستين", 0, 4.44),
    ("بلاتينيوم", "بلاتينيوم سليم فقسة", 0, 3.64),
    ("بلاتينيوم", "بلاتينيوم كوين", 0, 3.14),
    ("بلاتينيوم", "بلاتينيوم كوين فقستين", 0, 4.64),
    ("بلاتينيوم", "بلاتينيوم كوين فقسة", 0, 3.84),
    ("بلاتينيوم", "بلاتينيوم قصير فقستين", 0, 5.64),
    ("بلاتينيوم", "بلاتينيوم قصير ازرق وفضي", 0, 3.54),
    ("غلواز", "غلواز قصير احمر", 6.53, 6.56),
    ("غلواز", "غلواز قصير اصفر", 6.53, 6.56),
    ("غلواز", "غلواز كوين احمر S8", 6.62, 6.70),
    ("غلواز", "غلواز كوين اصفر S8", 6.62, 6.70),
    ("معسل", "فاخر اسود 250 غ شركة", 6.11, 6.00),
    ("معسل", "فاخر اسود 1 كغ شركة", 24.01, 24.00),
    ("معسل", "فاخر اسود 250 غ حرة دبي", 5.69, 5.63),
    ("معسل", "فاخر اسود كيلو حرة دبي مكفول", 24.01, 22.50),
    ("معسل", "فاخر تفاحتین عادي", 11.32, 11.50),
    ("معسل", "فاخر اسود 100 غ", 1.62, 1.55),
    ("معسل", "نخلة 100 غ", 1.75, 1.67),
    ("معسل", "فاخر تفاحتین أسود كروز شركة", 11.32, 11.50),
    ("معسل", "فاخر تفاح اسود متلج", 11.75, 11.92),
    ("معسل", "فاخر تفاحتين متلج", 11.75, 11.92),
    ("معسل", "مزایا تفاحتین فرنسي", 8.50, 8.50),
    ("معسل", "مزایا تفاحتین بحریني", 8.50, 8.50),
    ("معسل", "مزايا تفاح مصري", 8.50, 8.50),
    ("معسل", "مزايا بحريني كيلو", 16.32, 16.66),
    ("معسل", "مزايا كف بحريني تاريخ", 4.18, 4.09),
    ("معسل", "مزايا بولو", 8.50, 8.50),
    ("معسل", "مزايا علكة", 8.50, 8.50),
    ("معسل", "مزايا لولف", 8.50, 8.50),
    ("معسل", "مزايا روبي كراش", 8.84, 8.83),
    ("معسل", "مزايا علكة ونعنع", 8.50, 8.50),
    ("معسل", "مزايا نعنع", 8.50, 8.50),
    ("معسل", "یامال الشام مشكل", 3.41, 3.33),
    ("معسل", "معسل روز تفاحتین", 0, 0),
    ("معسل", "نخلة كروز صلاحية شهر 1/26", 16.83, 17.20),
    ("معسل", "معسل نخلة كف صلاحیة شهر 1/26", 7.99, 8.00),
    ("فحم", "شيخ الفحم صغير", 11.53, 0),
    ("فحم", "شيخ الفحم شوال (كبير)", 18.80, 0),
    ("فحم", "مرجانا فحم", 9.74, 10.00),
    ("فحم", "فحم الفرفور نوع اول", 2.94, 29.00),
    ("فحم", "فحم كوكو الزعيم الأصلي", 2.94, 29.00),
    ("فحم", "فحم الزعيم نص كيلو", 1.49, 30.00),
    ("فحم", "فحم الزعيم 4 كيلو شوي", 0, 7.50),
    ("فحم", "فحم ايكو نارة", 1.83, 29.00),
    ("فحم", "فحم الحريك", 2.99, 29.50),
    ("فحم", "سلفان الاصيل", 8.20, 8.00),
    ("فحم", "فحم برو ربع", 0.76, 30.00),
    ("فحم", "فحم برو نص كيلة", 1.49, 30.00),
    ("فيب", "فيب الفاخر 40000", 11.53, 10.00),
    ("فيب", "فيب الفاخر 12000", 9.82, 9.50),
    ("فيب", "فيب الفاخر 8000", 8.97, 8.50),
    ("فيب", "فيب ملكي 1500", 0, 0),
    ("فيب", "فيب ملكي 10000", 7.26, 7.00),
    ("فيب", "فيب ملكي 18000", 8.54, 8.00),
    ("فيب", "فيب ملكي 20000", 9.40, 9.00),
    ("فيب", "فيب فوزول 20000", 0, 7.50),
    ("قداحات", "قداحات فينكس ضو الاصلية", 4.27, 80.00),
    ("قداحات", "قداحات بايدا ضو الاصلية", 3.84, 69.00),
    ("اركيلة", "اركيلة الزعيم واجهة", 25.64, 0),
]


def seed_defaults(db: Session) -> None:
    """Insert the global rate and the default price list into an empty database."""
    if db.get(Setting, settings.GLOBAL_RATE_KEY) is None:
        db.add(Setting(key=settings.GLOBAL_RATE_KEY, value=str(int(settings.DEFAULT_GLOBAL_RATE))))
        db.commit()

    if db.query(func.count(Category.id)).scalar():
        return

    categories = [Category(name=name, sort_order=index) for index, name in enumerate(CATEGORY_NAMES)]
    db.add_all(categories)
    db.flush()
    ids = {c.name: c.id for c in categories}

    db.add_all(
        Product(
            category_id=ids.get(category, settings.DEFAULT_CATEGORY_ID),
            name=name,
            carton_usd=carton_usd or 0,
            wholesale_carton_usd=wholesale_carton_usd or 0,
        )
        for category, name, carton_usd, wholesale_carton_usd in SEED_PRODUCTS
    )
    db.commit()
    logger.info("Default price list seeded", categories=len(categories), products=len(SEED_PRODUCTS))


def sync_legacy_costs(db: Session) -> int:
    """Copy the legacy carton cost into cost_usd where cost_usd was never set."""
    updated = (
        db.query(Product)
        .filter(or_(Product.cost_usd == 0, Product.cost_usd.is_(None)), Product.carton_usd > 0)
        .update({Product.cost_usd: Product.carton_usd}, synchronize_session=False)
    )
    db.commit()
    return updated


def init_db(engine: Engine, db: Session) -> None:
    """Create tables (dev only, no migrations), seed defaults, sync legacy costs."""
    Base.metadata.create_all(bind=engine)
    seed_defaults(db)
    synced = sync_legacy_costs(db)
    logger.info("Database tables created/verified", legacy_costs_synced=synced)
