"""Translator-owned message tables.

Each table is keyed by notification type, then language. Missing languages fall
back to English; types missing from a table use that table's generic fallback.
"""

from enum import Enum

from agrinotify.templates.renderer import Language, TemplateCatalog


class TemplateType(str, Enum):
    ORDER_MATCHED = "ORDER_MATCHED"
    PAYMENT_RECEIVED = "PAYMENT_RECEIVED"
    MATCH_EXPIRING = "MATCH_EXPIRING"
    ORDER_CANCELLED = "ORDER_CANCELLED"
    QUALITY_DISPUTE = "QUALITY_DISPUTE"
    HAULER_EN_ROUTE = "HAULER_EN_ROUTE"
    PICKUP_COMPLETE = "PICKUP_COMPLETE"
    DELIVERED = "DELIVERED"
    DROP_POINT_ASSIGNMENT = "DROP_POINT_ASSIGNMENT"
    DROP_POINT_CHANGE = "DROP_POINT_CHANGE"
    ORDER_CONFIRMATION = "ORDER_CONFIRMATION"
    DELIVERY_REMINDER = "DELIVERY_REMINDER"
    MATCH_EXPIRED = "MATCH_EXPIRED"
    EDUCATIONAL_CONTENT = "EDUCATIONAL_CONTENT"
    OTP = "OTP"
    ORDER_STATUS_UPDATE = "ORDER_STATUS_UPDATE"
    ORDER_DELAYED = "ORDER_DELAYED"


class OrderStatus(str, Enum):
    """Order tracking states a farmer is told about."""

    LISTED = "LISTED"
    MATCHED = "MATCHED"
    PICKUP_SCHEDULED = "PICKUP_SCHEDULED"
    AT_DROP_POINT = "AT_DROP_POINT"
    IN_TRANSIT = "IN_TRANSIT"
    DELIVERED = "DELIVERED"
    PAID = "PAID"


def order_status_key(status: OrderStatus | str) -> str:
    """Catalog key of the per-status variant, e.g. `ORDER_STATUS_PAID`."""

    return f"ORDER_STATUS_{OrderStatus(status).value}"


EN, KN, HI, TA, TE = Language.ENGLISH, Language.KANNADA, Language.HINDI, Language.TAMIL, Language.TELUGU


ORDER_STATUS_SMS = {
    OrderStatus.LISTED: {
        EN: "CropFresh: Your {{crop_name}} ({{quantity_kg}}kg) is listed for sale.",
        KN: "CropFresh: ನಿಮ್ಮ {{crop_name}} ({{quantity_kg}}ಕೆಜಿ) ಪಟ್ಟಿ ಮಾಡಲಾಗಿದೆ.",
        HI: "CropFresh: आपका {{crop_name}} ({{quantity_kg}}kg) लिस्ट हो गया।",
        TA: "CropFresh: உங்கள் {{crop_name}} ({{quantity_kg}}kg) பட்டியலிடப்பட்டது.",
        TE: "CropFresh: మీ {{crop_name}} ({{quantity_kg}}kg) జాబితాలో ఉంది.",
    },
    OrderStatus.MATCHED: {
        EN: "CropFresh: Buyer found for {{crop_name}}! ₹{{total_amount}} total. Check app now.",
        KN: "CropFresh: {{crop_name}}ಗೆ ಖರೀದಿದಾರ ಸಿಕ್ಕಿದ್ದಾರೆ! ₹{{total_amount}}. ಆ್ಯಪ್ ನೋಡಿ.",
        HI: "CropFresh: {{crop_name}} के लिए खरीदार मिला! ₹{{total_amount}}। ऐप देखें।",
        TA: "CropFresh: {{crop_name}} வாங்குபவர் கிடைத்தார்! ₹{{total_amount}}. ஆப் பாருங்கள்.",
        TE: "CropFresh: {{crop_name}}కు కొనుగోలుదారు! ₹{{total_amount}}. యాప్ చూడండి.",
    },
    OrderStatus.PICKUP_SCHEDULED: {
        EN: "CropFresh: Pickup scheduled for {{crop_name}}. Deliver to drop point by {{eta}}.",
        KN: "CropFresh: {{crop_name}} ಪಿಕಪ್ ನಿಗದಿ. {{eta}}ಗೆ ಡ್ರಾಪ್ ಪಾಯಿಂಟ್ಗೆ ತನ್ನಿ.",
        HI: "CropFresh: {{crop_name}} पिकअप निर्धारित। {{eta}} तक ड्रॉप पॉइंट लाएं।",
        TA: "CropFresh: {{crop_name}} பிக்அப் திட்டமிடப்பட்டது. {{eta}} வரை கொண்டு வாருங்கள்.",
        TE: "CropFresh: {{crop_name}} పికప్ షెడ్యూల్. {{eta}} లోపల తీసుకురండి.",
    },
    OrderStatus.AT_DROP_POINT: {
        EN: "CropFresh: {{crop_name}} received at drop point. Awaiting pickup.",
        KN: "CropFresh: {{crop_name}} ಡ್ರಾಪ್ ಪಾಯಿಂಟ್ನಲ್ಲಿ ಸ್ವೀಕರಿಸಲಾಗಿದೆ. ಪಿಕಪ್ ಕಾಯುತ್ತಿದೆ.",
        HI: "CropFresh: {{crop_name}} ड्रॉप पॉइंट पर प्राप्त। पिकअप का इंतजार।",
        TA: "CropFresh: {{crop_name}} டிராப் பாயிண்டில் பெறப்பட்டது. பிக்அப் காத்திருக்கிறது.",
        TE: "CropFresh: {{crop_name}} డ్రాప్ పాయింట్‌లో అందింది. పికప్ కోసం వేచి ఉంది.",
    },
    OrderStatus.IN_TRANSIT: {
        EN: "CropFresh: {{crop_name}} is on the way! Hauler: {{hauler_name}} ({{hauler_phone}}).",
        KN: "CropFresh: {{crop_name}} ಹೊರಟಿದೆ! ಹಾಲರ್: {{hauler_name}} ({{hauler_phone}}).",
        HI: "CropFresh: {{crop_name}} रास्ते में! ड्राइवर: {{hauler_name}} ({{hauler_phone}}).",
        TA: "CropFresh: {{crop_name}} பயணத்தில்! ஓட்டுநர்: {{hauler_name}} ({{hauler_phone}}).",
        TE: "CropFresh: {{crop_name}} మార్గంలో! డ్రైవర్: {{hauler_name}} ({{hauler_phone}}).",
    },
    OrderStatus.DELIVERED: {
        EN: "CropFresh: {{crop_name}} delivered! ₹{{total_amount}} payment processing.",
        KN: "CropFresh: {{crop_name}} ತಲುಪಿದೆ! ₹{{total_amount}} ಪಾವತಿ ಪ್ರಕ್ರಿಯೆಯಲ್ಲಿ.",
        HI: "CropFresh: {{crop_name}} पहुंच गया! ₹{{total_amount}} भुगतान प्रक्रिया में।",
        TA: "CropFresh: {{crop_name}} வந்துவிட்டது! ₹{{total_amount}} பணம் செயல்படுத்தப்படுகிறது.",
        TE: "CropFresh: {{crop_name}} చేరింది! ₹{{total_amount}} చెల్లింపు ప్రాసెస్‌లో.",
    },
    OrderStatus.PAID: {
        EN: "CropFresh: ₹{{total_amount}} paid to your account! UPI Ref: {{upi_transaction_id}}",
        KN: "CropFresh: ₹{{total_amount}} ನಿಮ್ಮ ಖಾತೆಗೆ ಬಂದಿದೆ! UPI: {{upi_transaction_id}}",
        HI: "CropFresh: ₹{{total_amount}} आपके खाते में! UPI Ref: {{upi_transaction_id}}",
        TA: "CropFresh: ₹{{total_amount}} உங்கள் கணக்கில்! UPI: {{upi_transaction_id}}",
        TE: "CropFresh: ₹{{total_amount}} మీ ఖాతాలో! UPI Ref: {{upi_transaction_id}}",
    },
}

ORDER_STATUS_TITLES = {
    OrderStatus.LISTED: {EN: "📝 Crop Listed", KN: "📝 ಪಟ್ಟಿ ಮಾಡಲಾಗಿದೆ", HI: "📝 सूचीबद्ध", TA: "📝 பட்டியலிடப்பட்டது", TE: "📝 జాబితా"},
    OrderStatus.MATCHED: {
        EN: "🎉 Buyer Matched!",
        KN: "🎉 ಖರೀದಿದಾರ ಸಿಕ್ಕಿದ್ದಾರೆ!",
        HI: "🎉 खरीदार मिला!",
        TA: "🎉 வாங்குபவர் கிடைத்தார்!",
        TE: "🎉 కొనుగోలుదారు!",
    },
    OrderStatus.PICKUP_SCHEDULED: {
        EN: "📅 Pickup Scheduled",
        KN: "📅 ಪಿಕಪ್ ನಿಗದಿ",
        HI: "📅 पिकअप निर्धारित",
        TA: "📅 பிக்அப் திட்டம்",
        TE: "📅 పికప్ షెడ్యూల్",
    },
    OrderStatus.AT_DROP_POINT: {
        EN: "📦 At Drop Point",
        KN: "📦 ಡ್ರಾಪ್ ಪಾಯಿಂಟ್",
        HI: "📦 ड्रॉप पॉइंट पर",
        TA: "📦 டிராப் பாயிண்ட்",
        TE: "📦 డ్రాప్ పాయింట్",
    },
    OrderStatus.IN_TRANSIT: {EN: "🚛 In Transit", KN: "🚛 ಸಾಗಣೆಯಲ್ಲಿ", HI: "🚛 रास्ते में", TA: "🚛 பயணத்தில்", TE: "🚛 మార్గంలో"},
    OrderStatus.DELIVERED: {EN: "✅ Delivered!", KN: "✅ ತಲುಪಿದೆ!", HI: "✅ पहुंच गया!", TA: "✅ வந்துவிட்டது!", TE: "✅ చేరింది!"},
    OrderStatus.PAID: {
        EN: "💰 Payment Received!",
        KN: "💰 ಹಣ ಬಂದಿದೆ!",
        HI: "💰 भुगतान मिला!",
        TA: "💰 பணம் வந்தது!",
        TE: "💰 డబ్బు వచ్చింది!",
    },
}


SMS_TEMPLATES = TemplateCatalog(
    "sms",
    {
        TemplateType.ORDER_MATCHED: {
            EN: "🎉 New Buyer Match! Your {{quantity_kg}}kg {{crop_name}} has a buyer. "
            "Price: ₹{{price_per_kg}}/kg (Total: ₹{{total_amount}}). Open app to Accept/Reject. -CropFresh",
            KN: "🎉 ಹೊಸ ಖರೀದಿದಾರ ಹೊಂದಾಣಿಕೆ! ನಿಮ್ಮ {{quantity_kg}}kg {{crop_name}} ಗೆ ಖರೀದಿದಾರ ಇದ್ದಾರೆ! "
            "ಬೆಲೆ: ₹{{price_per_kg}}/kg (ಒಟ್ಟು: ₹{{total_amount}}). ಅಪ್ಲಿಕೇಶನ್ ತೆರೆಯಿರಿ. -CropFresh",
            HI: "🎉 नया खरीदार मिला! आपके {{quantity_kg}}kg {{crop_name}} का खरीदार मिला! "
            "कीमत: ₹{{price_per_kg}}/kg (कुल: ₹{{total_amount}})। ऐप खोलकर स्वीकार/अस्वीकार करें। -CropFresh",
            TA: "🎉 புதிய வாங்குபவர் கிடைத்தது! உங்கள் {{quantity_kg}}kg {{crop_name}} க்கு வாங்குபவர் உள்ளார்! "
            "விலை: ₹{{price_per_kg}}/kg (மொத்தம்: ₹{{total_amount}}). ஆப்பைத் திறக்கவும். -CropFresh",
            TE: "🎉 కొత్త కొనుగోలుదారు దొరికారు! మీ {{quantity_kg}}kg {{crop_name}} కి కొనుగోలుదారు ఉన్నారు! "
            "ధర: ₹{{price_per_kg}}/kg (మొత్తం: ₹{{total_amount}}). యాప్ తెరవండి. -CropFresh",
        },
        TemplateType.PAYMENT_RECEIVED: {
            EN: "CropFresh: ₹{{amount}} received for {{crop_name}}. UPI Ref: {{upi_id}}. Check your bank.",
            KN: "CropFresh: {{crop_name}}ಗೆ ₹{{amount}} ಬಂದಿದೆ. UPI: {{upi_id}}. ಬ್ಯಾಂಕ್ ಪರಿಶೀಲಿಸಿ.",
            HI: "CropFresh: {{crop_name}} के लिए ₹{{amount}} मिला। UPI: {{upi_id}}। बैंक देखें।",
            TA: "CropFresh: {{crop_name}} க்கு ₹{{amount}} வந்தது. UPI: {{upi_id}}. வங்கி பாருங்கள்.",
            TE: "CropFresh: {{crop_name}}కు ₹{{amount}} వచ్చింది. UPI: {{upi_id}}. బ్యాంక్ చూడండి.",
        },
        TemplateType.MATCH_EXPIRING: {
            EN: "CropFresh: URGENT! Match for {{crop_name}} expiring in {{hours}}hrs. Open app to accept.",
            KN: "CropFresh: ತುರ್ತು! {{crop_name}} ಮ್ಯಾಚ್ {{hours}} ಗಂಟೆಯಲ್ಲಿ ಮುಕ್ತಾಯ. ಒಪ್ಪಿಕೊಳ್ಳಿ.",
            HI: "CropFresh: जरूरी! {{crop_name}} का मैच {{hours}} घंटे में खत्म। ऐप खोलें।",
            TA: "CropFresh: அவசரம்! {{crop_name}} மேட்ச் {{hours}} மணியில் முடியும். ஆப் திறக்கவும்.",
            TE: "CropFresh: అత్యవసరం! {{crop_name}} మ్యాచ్ {{hours}} గంటల్లో ముగుస్తుంది. యాప్ తెరవండి.",
        },
        TemplateType.ORDER_CANCELLED: {
            EN: "CropFresh: {{crop_name}} order cancelled. Reason: {{reason}}. Your crop is relisted.",
            KN: "CropFresh: {{crop_name}} ಆರ್ಡರ್ ರದ್ದಾಗಿದೆ. ಕಾರಣ: {{reason}}. ಮತ್ತೆ ಪಟ್ಟಿ ಮಾಡಲಾಗಿದೆ.",
            HI: "CropFresh: {{crop_name}} ऑर्डर रद्द। कारण: {{reason}}। फिर से लिस्ट हुआ।",
            TA: "CropFresh: {{crop_name}} ஆர்டர் ரத்து. காரணம்: {{reason}}. மீண்டும் பட்டியலிடப்பட்டது.",
            TE: "CropFresh: {{crop_name}} ఆర్డర్ రద్దయింది. కారణం: {{reason}}. మళ్ళీ జాబితా చేయబడింది.",
        },
        TemplateType.QUALITY_DISPUTE: {
            EN: "CropFresh: Quality issue reported for {{crop_name}}. Open app to view details and respond.",
            KN: "CropFresh: {{crop_name}}ಗೆ ಗುಣಮಟ್ಟದ ಸಮಸ್ಯೆ. ವಿವರಗಳನ್ನು ನೋಡಲು ಆ್ಯಪ್ ತೆರೆಯಿರಿ.",
            HI: "CropFresh: {{crop_name}} में गुणवत्ता समस्या। विवरण देखने के लिए ऐप खोलें।",
            TA: "CropFresh: {{crop_name}} தரப் பிரச்சினை. விவரங்களைப் பார்க்க ஆப் திறக்கவும்.",
            TE: "CropFresh: {{crop_name}} నాణ్యత సమస్య. వివరాలు చూడటానికి యాప్ తెరవండి.",
        },
        TemplateType.ORDER_CONFIRMATION: {
            EN: "✅ Match Accepted! Order #{{order_id}} confirmed. {{quantity_kg}}kg {{crop_name}} "
            "@ ₹{{price_per_kg}}/kg, Total: ₹{{total_amount}}. Delivery: {{delivery_date}}. -CropFresh",
            KN: "✅ ಹೊಂದಾಣಿಕೆ ಸ್ವೀಕರಿಸಲಾಗಿದೆ! ಆರ್ಡರ್ #{{order_id}} ದೃಢಪಡಿಸಲಾಗಿದೆ. {{quantity_kg}}kg {{crop_name}} "
            "@ ₹{{price_per_kg}}/kg, ಒಟ್ಟು: ₹{{total_amount}}. ವಿತರಣೆ: {{delivery_date}}. -CropFresh",
            HI: "✅ मैच स्वीकृत! ऑर्डर #{{order_id}} पुष्टि हुई। {{quantity_kg}}kg {{crop_name}} "
            "@ ₹{{price_per_kg}}/kg, कुल: ₹{{total_amount}}। डिलीवरी: {{delivery_date}}। -CropFresh",
            TA: "✅ பொருத்தம் ஏற்றுக்கொள்ளப்பட்டது! ஆர்டர் #{{order_id}} உறுதிப்படுத்தப்பட்டது. {{quantity_kg}}kg {{crop_name}} "
            "@ ₹{{price_per_kg}}/kg, மொத்தம்: ₹{{total_amount}}. டெலிவரி: {{delivery_date}}. -CropFresh",
            TE: "✅ మ్యాచ్ ఆమోదించబడింది! ఆర్డర్ #{{order_id}} నిర్ధారించబడింది. {{quantity_kg}}kg {{crop_name}} "
            "@ ₹{{price_per_kg}}/kg, మొత్తం: ₹{{total_amount}}. డెలివరీ: {{delivery_date}}. -CropFresh",
        },
        TemplateType.DROP_POINT_ASSIGNMENT: {
            EN: "Your {{quantity_kg}}kg {{crop_name}} listing confirmed! Deliver to: {{drop_point_name}}, "
            "{{drop_point_address}}. When: {{time_window}}. Bring required crates. -CropFresh",
            KN: "ನಿಮ್ಮ {{quantity_kg}}kg {{crop_name}} ಪಟ್ಟಿ ದೃಢಪಡಿಸಲಾಗಿದೆ! ತಲುಪಿಸಿ: {{drop_point_name}}, "
            "{{drop_point_address}}. ಯಾವಾಗ: {{time_window}}. ಅಗತ್ಯ ಪೆಟ್ಟಿಗೆಗಳನ್ನು ತನ್ನಿ. -CropFresh",
            HI: "आपकी {{quantity_kg}}kg {{crop_name}} लिस्टिंग पुष्टि हुई! डिलीवर करें: {{drop_point_name}}, "
            "{{drop_point_address}}। कब: {{time_window}}। जरूरी क्रेट लाएं। -CropFresh",
            TA: "உங்கள் {{quantity_kg}}kg {{crop_name}} பட்டியல் உறுதிப்படுத்தப்பட்டது! டெலிவரி: {{drop_point_name}}, "
            "{{drop_point_address}}. எப்போது: {{time_window}}. தேவையான கூடைகளை கொண்டு வாருங்கள். -CropFresh",
            TE: "మీ {{quantity_kg}}kg {{crop_name}} లిస్టింగ్ నిర్ధారించబడింది! డెలివర్ చేయండి: {{drop_point_name}}, "
            "{{drop_point_address}}. ఎప్పుడు: {{time_window}}. అవసరమైన క్రేట్లు తీసుకురండి. -CropFresh",
        },
        TemplateType.DROP_POINT_CHANGE: {
            EN: "⚠️ Drop Point Changed! OLD: {{old_drop_point_name}} (cancelled). NEW: {{drop_point_name}}, "
            "{{drop_point_address}}. When: {{time_window}}. Reason: {{change_reason}}. -CropFresh",
            KN: "⚠️ ಡ್ರಾಪ್ ಪಾಯಿಂಟ್ ಬದಲಾಯಿಸಲಾಗಿದೆ! ಹಳೆಯ: {{old_drop_point_name}} (ರದ್ದಾಗಿದೆ). ಹೊಸ: {{drop_point_name}}, "
            "{{drop_point_address}}. ಯಾವಾಗ: {{time_window}}. ಕಾರಣ: {{change_reason}}. -CropFresh",
            HI: "⚠️ ड्रॉप पॉइंट बदल गया! पुराना: {{old_drop_point_name}} (रद्द)। नया: {{drop_point_name}}, "
            "{{drop_point_address}}। कब: {{time_window}}। कारण: {{change_reason}}। -CropFresh",
            TA: "⚠️ டிராப் பாயிண்ட் மாற்றப்பட்டது! பழையது: {{old_drop_point_name}} (ரத்து). புதியது: {{drop_point_name}}, "
            "{{drop_point_address}}. எப்போது: {{time_window}}. காரணம்: {{change_reason}}. -CropFresh",
            TE: "⚠️ డ్రాప్ పాయింట్ మారింది! పాతది: {{old_drop_point_name}} (రద్దు). కొత్తది: {{drop_point_name}}, "
            "{{drop_point_address}}. ఎప్పుడు: {{time_window}}. కారణం: {{change_reason}}. -CropFresh",
        },
        # English only until translations land.
        TemplateType.HAULER_EN_ROUTE: {
            EN: "CropFresh: {{hauler_name}} is on the way for order {{order_id}}. ETA {{eta_minutes}} min.",
        },
        TemplateType.PICKUP_COMPLETE: {
            EN: "CropFresh: {{quantity_kg}}kg {{crop_name}} collected from {{drop_point_name}}.",
        },
        TemplateType.DELIVERED: {
            EN: "CropFresh: {{quantity_kg}}kg {{crop_name}} delivered to the buyer! Payment is being processed.",
        },
        TemplateType.DELIVERY_REMINDER: {
            EN: "CropFresh: Reminder, bring {{crop_name}} to {{drop_point_name}} during {{time_window}}.",
        },
        TemplateType.MATCH_EXPIRED: {
            EN: "CropFresh: The match for {{crop_name}} has expired. Your listing is active again.",
        },
        TemplateType.OTP: {
            EN: "CropFresh: Your OTP is {{otp}}. It is valid for {{valid_minutes}} minutes. Do not share it.",
        },
        TemplateType.EDUCATIONAL_CONTENT: {
            EN: "CropFresh tip: {{title}}",
        },
        TemplateType.ORDER_DELAYED: {
            EN: "CropFresh: {{crop_name}} delayed {{delay_minutes}} min. Reason: {{reason}}. New ETA: {{new_eta}}",
            KN: "CropFresh: {{crop_name}} {{delay_minutes}} ನಿಮಿಷ ತಡ. ಕಾರಣ: {{reason}}. ಹೊಸ ETA: {{new_eta}}",
            HI: "CropFresh: {{crop_name}} {{delay_minutes}} मिनट देरी। कारण: {{reason}}। नया ETA: {{new_eta}}",
            TA: "CropFresh: {{crop_name}} {{delay_minutes}} நிமிடம் தாமதம். காரணம்: {{reason}}. புதிய ETA: {{new_eta}}",
            TE: "CropFresh: {{crop_name}} {{delay_minutes}} నిమి ఆలస్యం. కారణం: {{reason}}. కొత్త ETA: {{new_eta}}",
        },
        TemplateType.ORDER_STATUS_UPDATE: {
            EN: "CropFresh: Order {{order_id}} status: {{status}}",
        },
        **{order_status_key(status): variants for status, variants in ORDER_STATUS_SMS.items()},
    },
    fallback="CropFresh: Notification for {{template_key}}",
)


PUSH_TITLES = TemplateCatalog(
    "push_title",
    {
        TemplateType.ORDER_MATCHED: {
            EN: "🎉 Buyer Found!",
            KN: "🎉 ಖರೀದಿದಾರ ಸಿಕ್ಕಿದ್ದಾರೆ!",
            HI: "🎉 खरीदार मिला!",
            TA: "🎉 வாங்குபவர் கிடைத்தார்!",
            TE: "🎉 కొనుగోలుదారు దొరికాడు!",
        },
        TemplateType.PAYMENT_RECEIVED: {
            EN: "💰 Payment Received",
            KN: "💰 ಹಣ ಬಂದಿದೆ",
            HI: "💰 भुगतान मिला",
            TA: "💰 பணம் வந்தது",
            TE: "💰 చెల్లింపు వచ్చింది",
        },
        TemplateType.MATCH_EXPIRING: {
            EN: "⏰ Match Expiring Soon",
            KN: "⏰ ಮ್ಯಾಚ್ ಮುಕ್ತಾಯ",
            HI: "⏰ मैच खत्म होगा",
            TA: "⏰ மேட்ச் முடியப்போகிறது",
            TE: "⏰ మ్యాచ్ ముగుస్తుంది",
        },
        TemplateType.ORDER_CANCELLED: {
            EN: "❌ Order Cancelled",
            KN: "❌ ಆರ್ಡರ್ ರದ್ದು",
            HI: "❌ ऑर्डर रद्द",
            TA: "❌ ஆர்டர் ரத்து",
            TE: "❌ ఆర్డర్ రద్దు",
        },
        TemplateType.HAULER_EN_ROUTE: {
            EN: "🚛 Hauler On The Way",
            KN: "🚛 ಹಾಲರ್ ಬರುತ್ತಿದ್ದಾರೆ",
            HI: "🚛 हॉलर रास्ते में",
            TA: "🚛 ஹாலர் வருகிறார்",
            TE: "🚛 హాలర్ వస్తున్నాడు",
        },
        TemplateType.DELIVERED: {
            EN: "✅ Delivered Successfully",
            KN: "✅ ತಲುಪಿದೆ",
            HI: "✅ पहुंच गया",
            TA: "✅ வந்துவிட்டது",
            TE: "✅ చేరింది",
        },
        TemplateType.PICKUP_COMPLETE: {EN: "📦 Pickup Complete"},
        TemplateType.DROP_POINT_ASSIGNMENT: {EN: "📍 Drop Point Assigned"},
        TemplateType.DROP_POINT_CHANGE: {EN: "⚠️ Drop Point Changed"},
        TemplateType.QUALITY_DISPUTE: {EN: "⚠️ Quality Issue Reported"},
        TemplateType.ORDER_CONFIRMATION: {EN: "✅ Order Confirmed!"},
        TemplateType.ORDER_DELAYED: {
            EN: "⚠️ Order Delayed",
            KN: "⚠️ ತಡವಾಗಿದೆ",
            HI: "⚠️ देरी हुई",
            TA: "⚠️ தாமதம்",
            TE: "⚠️ ఆలస్యం",
        },
        TemplateType.ORDER_STATUS_UPDATE: {EN: "CropFresh Update"},
        **{order_status_key(status): variants for status, variants in ORDER_STATUS_TITLES.items()},
    },
    fallback="CropFresh Notification",
)


PUSH_BODIES = TemplateCatalog(
    "push_body",
    {
        TemplateType.ORDER_MATCHED: {EN: "Accept match for {{quantity_kg}}kg {{crop_name}} at ₹{{total_amount}}"},
        TemplateType.PAYMENT_RECEIVED: {EN: "₹{{amount}} for {{crop_name}}. Check your bank."},
        TemplateType.MATCH_EXPIRING: {EN: "Accept match for {{crop_name}} within {{hours}} hours"},
        TemplateType.ORDER_CANCELLED: {EN: "Your {{crop_name}} order was cancelled. Reason: {{reason}}"},
        TemplateType.HAULER_EN_ROUTE: {EN: "{{hauler_name}} arriving in {{eta_minutes}} minutes"},
        TemplateType.PICKUP_COMPLETE: {EN: "{{quantity_kg}}kg {{crop_name}} collected from {{drop_point_name}}"},
        TemplateType.DELIVERED: {EN: "Your {{quantity_kg}}kg {{crop_name}} has been delivered to the buyer!"},
        TemplateType.DROP_POINT_ASSIGNMENT: {EN: "Deliver to {{drop_point_name}} {{time_window}}"},
        TemplateType.DROP_POINT_CHANGE: {EN: "New location: {{drop_point_name}}. Reason: {{change_reason}}"},
        TemplateType.ORDER_CONFIRMATION: {EN: "Order #{{order_id}} confirmed - ₹{{total_amount}}"},
        TemplateType.ORDER_DELAYED: {EN: "{{crop_name}} delayed {{delay_minutes}} min - {{reason}}"},
        TemplateType.ORDER_STATUS_UPDATE: {EN: "{{crop_name}} ({{quantity_kg}}kg) - ₹{{total_amount}}"},
    },
    fallback="You have a new notification",
)


DEFAULT_DEEPLINKS = {
    TemplateType.ORDER_MATCHED: "/match-details",
    TemplateType.PAYMENT_RECEIVED: "/earnings",
    TemplateType.MATCH_EXPIRING: "/match-details",
    TemplateType.ORDER_CANCELLED: "/orders",
    TemplateType.QUALITY_DISPUTE: "/orders",
    TemplateType.HAULER_EN_ROUTE: "/orders",
    TemplateType.PICKUP_COMPLETE: "/orders",
    TemplateType.DELIVERED: "/orders",
    TemplateType.DROP_POINT_ASSIGNMENT: "/drop-point",
    TemplateType.DROP_POINT_CHANGE: "/drop-point",
    TemplateType.ORDER_CONFIRMATION: "/orders",
    TemplateType.ORDER_STATUS_UPDATE: "/orders",
    TemplateType.ORDER_DELAYED: "/orders",
    TemplateType.MATCH_EXPIRED: "/listings",
    TemplateType.EDUCATIONAL_CONTENT: "/tips",
}


def default_deeplink(template_key: str) -> str:
    try:
        return DEFAULT_DEEPLINKS[TemplateType(template_key)]
    except (ValueError, KeyError):
        return "/notifications"


def render_sms(template_key: str, language: str | Language | None, variables: dict | None = None) -> str:
    return SMS_TEMPLATES.render(template_key, language, variables)


def render_push(
    template_key: str, language: str | Language | None, variables: dict | None = None
) -> tuple[str, str]:
    """Localized `(title, body)` for a push notification."""

    return (
        PUSH_TITLES.render(template_key, language, variables),
        PUSH_BODIES.render(template_key, language, variables),
    )
