"""Enumeration types for lending domain entities."""

from enum import Enum


class LabeledEnum(str, Enum):
    """String enum carrying an Indonesian display label for reports."""

    @property
    def label(self) -> str:
        return LABELS.get(type(self), {}).get(self.name, self.value)


class Gender(LabeledEnum):
    MALE = "MALE"
    FEMALE = "FEMALE"


class MaritalStatus(LabeledEnum):
    MARRIED = "MARRIED"
    SINGLE = "SINGLE"
    DIVORCED_DEATH = "DIVORCED_DEATH"
    WIDOW = "WIDOW"
    WIDOWER = "WIDOWER"


class PensionType(LabeledEnum):
    TASPEN = "TASPEN"
    ASABRI = "ASABRI"


class LoanType(LabeledEnum):
    NEW = "NEW"
    TOPUP = "TOPUP"
    TAKEOVER = "TAKEOVER"


class InterestType(LabeledEnum):
    ANNUITY = "ANNUITY"  # rate is annual
    FLAT = "FLAT"  # rate is monthly


class RepaymentType(LabeledEnum):
    TOPUP = "TOPUP"
    TAKEOVER = "TAKEOVER"
    PKA = "PKA"
    OTHERS = "OTHERS"


class CustomerStatus(LabeledEnum):
    ACTIVE = "ACTIVE"
    PKA = "PKA"
    SETTLED_VIA_TOPUP = "SETTLED_VIA_TOPUP"
    SETTLED_PLAIN = "SETTLED_PLAIN"
    CANCELLED = "CANCELLED"
    DECEASED = "DECEASED"


class DocumentType(LabeledEnum):
    IMAGE = "image"
    PDF = "pdf"
    AUDIO = "audio"
    VIDEO = "video"
    OTHER = "other"


class DocumentCategory(LabeledEnum):
    KTP = "KTP"
    KK = "KK"
    SK = "SK"
    KARIP = "KARIP"
    EPOT = "EPOT"
    DAPEM = "DAPEM"
    SLIK = "SLIK"
    ASABRI = "ASABRI"
    NPWP = "NPWP"
    SLIP_GAJI = "SLIP_GAJI"
    REK_KORAN = "REK_KORAN"
    OTHER = "OTHER"
    AUDIO = "AUDIO"
    VIDEO = "VIDEO"
    BUKTI_LUNAS = "BUKTI_LUNAS"
    SURAT_KEMATIAN = "SURAT_KEMATIAN"
    SURAT_PENARIKAN_BLOKIR = "SURAT_PENARIKAN_BLOKIR"
    SPK = "SPK"
    APLIKASI_KREDIT = "APLIKASI_KREDIT"
    PERNYATAAN_DEBITUR = "PERNYATAAN_DEBITUR"
    SKKT = "SKKT"
    PERMOHONAN_ANGGOTA = "PERMOHONAN_ANGGOTA"
    PERNYATAAN_MUTASI = "PERNYATAAN_MUTASI"
    SURAT_KUASA = "SURAT_KUASA"
    BUKU_ANGGOTA = "BUKU_ANGGOTA"
    PERNYATAAN_BATAL = "PERNYATAAN_BATAL"
    TANDA_TERIMA_SK = "TANDA_TERIMA_SK"
    NOTA_KREDIT = "NOTA_KREDIT"
    KWITANSI = "KWITANSI"
    KUASA_PENCAIRAN = "KUASA_PENCAIRAN"
    TANDA_PENYERAHAN = "TANDA_PENYERAHAN"
    SK_ASLI = "SK_ASLI"
    FOTO_NASABAH = "FOTO_NASABAH"
    FOTO_NASABAH_MARKETING = "FOTO_NASABAH_MARKETING"


# Keyed per enum class: str-valued members of different enums compare equal
LABELS: dict[type, dict[str, str]] = {
    Gender: {"MALE": "Laki-laki", "FEMALE": "Perempuan"},
    MaritalStatus: {
        "MARRIED": "Menikah",
        "SINGLE": "Belum Menikah",
        "DIVORCED_DEATH": "Cerai Mati",
        "WIDOW": "Janda",
        "WIDOWER": "Duda",
    },
    PensionType: {"TASPEN": "Taspen", "ASABRI": "Asabri"},
    LoanType: {"NEW": "Baru", "TOPUP": "Top Up", "TAKEOVER": "Take Over"},
    InterestType: {"ANNUITY": "Anuitas (Tahunan)", "FLAT": "Flat (Bulanan)"},
    RepaymentType: {
        "TOPUP": "Top Up",
        "TAKEOVER": "Take Over (TO)",
        "PKA": "PKA",
        "OTHERS": "Lainnya",
    },
    CustomerStatus: {
        "ACTIVE": "Aktif",
        "PKA": "PKA (Pelunasan Dipercepat)",
        "SETTLED_VIA_TOPUP": "Lunas (Top Up)",
        "SETTLED_PLAIN": "Lunas Murni",
        "CANCELLED": "Batal",
        "DECEASED": "Meninggal Dunia",
    },
}
